# -*- coding: utf-8 -*-
"""Block decomposition of the global n x n grid."""

# Import dataclass for the block record.
from dataclasses import dataclass

# Import typing primitives.
from typing import List, Tuple

# Import local errors and mesh helpers.
from .errors import GridDivisibilityError
from .topology import mesh_coords


@dataclass(frozen=True)
class LocalBlock:
    """Geometry of one worker's block.

    Attributes
    ----------
    n : int
        Global grid size (the grid is n x n).
    bx, by : int
        Block width and height (interior cells).
    offx, offy : int
        Global coordinates of the block's first interior cell.
    """

    n: int
    bx: int
    by: int
    offx: int
    offy: int

    @property
    def padded_shape(self) -> Tuple[int, int]:
        """Return the (rows, cols) shape of the ghost-padded buffer."""
        return self.by + 2, self.bx + 2

    @property
    def padded_size(self) -> int:
        """Return the number of cells in the ghost-padded buffer."""
        return (self.bx + 2) * (self.by + 2)

    def contains(self, gx: int, gy: int) -> bool:
        """Return True if global cell (gx, gy) lies in this block."""
        return self.offx <= gx < self.offx + self.bx and self.offy <= gy < self.offy + self.by


def check_divisibility(n: int, px: int, py: int) -> None:
    """Raise GridDivisibilityError (exit 2 for px, 3 for py) on uneven splits."""
    if n % px != 0:
        raise GridDivisibilityError(f"grid size n={n} must be divisible by px={px}.", exit_code=2)
    if n % py != 0:
        raise GridDivisibilityError(f"grid size n={n} must be divisible by py={py}.", exit_code=3)


def decompose(n: int, px: int, py: int, rx: int, ry: int) -> LocalBlock:
    """Return the block owned by the worker at mesh coordinates (rx, ry)."""
    check_divisibility(n, px, py)
    bx = n // px
    by = n // py
    return LocalBlock(n=n, bx=bx, by=by, offx=rx * bx, offy=ry * by)


def block_layout(n: int, dims: Tuple[int, int]) -> List[LocalBlock]:
    """Return every block of the mesh in (non-reordered) rank order."""
    px, py = dims
    return [decompose(n, px, py, *mesh_coords(rank, dims)) for rank in range(px * py)]
