# -*- coding: utf-8 -*-
"""Fixed heat sources: definition, localization and injection."""

# Import dataclass for source records.
from dataclasses import dataclass

# Import typing primitives.
from typing import Iterable, List, Optional, Sequence

# Import numpy for buffer writes.
import numpy as np

# Import local helpers.
from .decomposition import LocalBlock
from .errors import ConfigurationError
from .grid import cell_index


@dataclass(frozen=True)
class HeatSource:
    """A heat source at global grid coordinates (x, y)."""

    x: int
    y: int


def default_sources(n: int) -> List[HeatSource]:
    """Return the three standard sources for an n x n grid."""
    return [
        HeatSource(n // 2, n // 2),
        HeatSource(n // 3, n // 3),
        HeatSource(n * 4 // 5, n * 8 // 9),
    ]


def sources_from_config(raw: Optional[Sequence[Sequence[int]]], n: int) -> List[HeatSource]:
    """Build sources from a list of [x, y] pairs, or the defaults when unset."""
    if raw is None:
        return default_sources(n)
    out: List[HeatSource] = []
    for item in raw:
        if len(item) != 2:
            raise ConfigurationError(f"Heat source must be an [x, y] pair, got {item!r}")
        x, y = int(item[0]), int(item[1])
        if not (0 <= x < n and 0 <= y < n):
            raise ConfigurationError(f"Heat source ({x}, {y}) lies outside the {n}x{n} grid")
        out.append(HeatSource(x, y))
    return out


def localize_sources(sources: Iterable[HeatSource], block: LocalBlock) -> List[int]:
    """Return flat padded indices of the sources that fall inside `block`."""
    local: List[int] = []
    for src in sources:
        if block.contains(src.x, src.y):
            # +1 skips the ghost border.
            lx = src.x - block.offx + 1
            ly = src.y - block.offy + 1
            local.append(cell_index(lx, ly, block.bx, block.by))
    return local


def inject_sources(grid: np.ndarray, local_sources: Sequence[int], energy: float) -> None:
    """Overwrite each local source cell with `energy` (absolute, idempotent)."""
    if local_sources:
        grid[np.asarray(local_sources, dtype=np.intp)] = float(energy)
