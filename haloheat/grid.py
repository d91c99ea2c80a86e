# -*- coding: utf-8 -*-
"""Ghost-padded grid buffers and the tagged double buffer."""

# Import dataclass for the double buffer.
from dataclasses import dataclass, field

# Import typing primitives.
from typing import Dict, Optional

# Import numpy for the dense arrays.
import numpy as np

# Import local block geometry.
from .decomposition import LocalBlock

SLOT_NAMES = ("a", "b")


def cell_index(x: int, y: int, bx: int, by: Optional[int] = None) -> int:
    """Return the flat offset of padded cell (x, y) in a row-major block buffer.

    Coordinates are padded coordinates: the interior spans ``1..bx`` and
    ``1..by``; ``0`` and ``bx + 1`` / ``by + 1`` are the ghost cells. ``by``
    is optional and only enables the row bounds check.
    """
    if not 0 <= x <= bx + 1:
        raise IndexError(f"x={x} outside padded width 0..{bx + 1}")
    if y < 0 or (by is not None and y > by + 1):
        raise IndexError(f"y={y} outside padded height")
    return y * (bx + 2) + x


def as_2d(buf: np.ndarray, block: LocalBlock) -> np.ndarray:
    """Return a [y, x] view of a flat padded buffer."""
    return buf.reshape(block.padded_shape)


def interior(buf: np.ndarray, block: LocalBlock) -> np.ndarray:
    """Return a (by, bx) view of the interior cells."""
    return as_2d(buf, block)[1:block.by + 1, 1:block.bx + 1]


def allocate_grid(block: LocalBlock) -> np.ndarray:
    """Return a zeroed flat padded buffer."""
    return np.zeros(block.padded_size, dtype=np.float64)


@dataclass
class DoubleBuffer:
    """Two named grid slots whose current/next roles alternate on swap()."""

    slots: Dict[str, np.ndarray]
    current_slot: str = SLOT_NAMES[0]
    swaps: int = field(default=0)

    @property
    def next_slot(self) -> str:
        """Return the name of the slot written by the next update."""
        return SLOT_NAMES[1] if self.current_slot == SLOT_NAMES[0] else SLOT_NAMES[0]

    @property
    def current(self) -> np.ndarray:
        """Buffer read by the stencil (and injected, packed, unpacked)."""
        return self.slots[self.current_slot]

    @property
    def next(self) -> np.ndarray:
        """Buffer written by the stencil."""
        return self.slots[self.next_slot]

    def swap(self) -> None:
        """Exchange the current and next roles without copying."""
        self.current_slot = self.next_slot
        self.swaps += 1


def allocate_grids(block: LocalBlock) -> DoubleBuffer:
    """Allocate both grid slots for a block."""
    return DoubleBuffer(slots={name: allocate_grid(block) for name in SLOT_NAMES})
