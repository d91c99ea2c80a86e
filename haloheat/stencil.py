# -*- coding: utf-8 -*-
"""Five-point averaging stencil."""

# Import numpy for vectorized updates.
import numpy as np

# Import local grid helpers.
from .decomposition import LocalBlock
from .grid import as_2d


def update_grid(old: np.ndarray, new: np.ndarray, block: LocalBlock) -> float:
    """Update the interior of `new` from the haloed `old` and return its heat.

    new[x, y] = new[x, y] / 2 + (old[x-1, y] + old[x+1, y] + old[x, y-1] + old[x, y+1]) / 4 / 2

    The previous content of `new` takes part in the update, so callers must
    swap buffers rather than reallocate them.
    """
    a = as_2d(old, block)
    b = as_2d(new, block)
    by, bx = block.by, block.bx
    neighbors = a[1:by + 1, 0:bx] + a[1:by + 1, 2:bx + 2] + a[0:by, 1:bx + 1] + a[2:by + 2, 1:bx + 1]
    inner = b[1:by + 1, 1:bx + 1]
    inner[...] = inner / 2.0 + neighbors / 4.0 / 2.0
    return float(inner.sum())
