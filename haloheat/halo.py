# -*- coding: utf-8 -*-
"""Halo send/receive buffers with pack and unpack.

Pack reads the outermost interior lines of the current buffer; unpack writes
the received lines into the ghost border:

    north: row y=1      -> neighbor,  ghost row y=0      <- north neighbor
    south: row y=by     -> neighbor,  ghost row y=by+1   <- south neighbor
    east:  column x=bx  -> neighbor,  ghost col x=bx+1   <- east neighbor
    west:  column x=1   -> neighbor,  ghost col x=0      <- west neighbor
"""

# Import dataclass for the buffer set.
from dataclasses import dataclass

# Import typing primitives.
from typing import Dict, Iterable

# Import numpy for contiguous line buffers.
import numpy as np

# Import local grid helpers.
from .decomposition import LocalBlock
from .grid import as_2d

NORTH = "north"
SOUTH = "south"
EAST = "east"
WEST = "west"

# Fixed posting order for receives and sends.
DIRECTIONS = (NORTH, SOUTH, EAST, WEST)

OPPOSITE = {NORTH: SOUTH, SOUTH: NORTH, EAST: WEST, WEST: EAST}


@dataclass
class HaloBuffers:
    """Send and receive line buffers, one per direction, owned by one worker."""

    send: Dict[str, np.ndarray]
    recv: Dict[str, np.ndarray]


def line_length(block: LocalBlock, direction: str) -> int:
    """Return bx for north/south and by for east/west."""
    return block.bx if direction in (NORTH, SOUTH) else block.by


def allocate_halo_buffers(block: LocalBlock) -> HaloBuffers:
    """Allocate zeroed send and receive buffers sized to the block edges."""
    send = {d: np.zeros(line_length(block, d), dtype=np.float64) for d in DIRECTIONS}
    recv = {d: np.zeros(line_length(block, d), dtype=np.float64) for d in DIRECTIONS}
    return HaloBuffers(send=send, recv=recv)


def pack(grid: np.ndarray, block: LocalBlock, halo: HaloBuffers) -> None:
    """Copy the four interior boundary lines of `grid` into the send buffers."""
    a = as_2d(grid, block)
    bx, by = block.bx, block.by
    np.copyto(halo.send[NORTH], a[1, 1:bx + 1])
    np.copyto(halo.send[SOUTH], a[by, 1:bx + 1])
    np.copyto(halo.send[EAST], a[1:by + 1, bx])
    np.copyto(halo.send[WEST], a[1:by + 1, 1])


def unpack(grid: np.ndarray, block: LocalBlock, halo: HaloBuffers, skip: Iterable[str] = ()) -> None:
    """Write the receive buffers into the ghost border of `grid`.

    Directions listed in `skip` have no neighbor; their ghost cells keep
    whatever they held before.
    """
    a = as_2d(grid, block)
    bx, by = block.bx, block.by
    skipped = set(skip)
    if NORTH not in skipped:
        a[0, 1:bx + 1] = halo.recv[NORTH]
    if SOUTH not in skipped:
        a[by + 1, 1:bx + 1] = halo.recv[SOUTH]
    if EAST not in skipped:
        a[1:by + 1, bx + 1] = halo.recv[EAST]
    if WEST not in skipped:
        a[1:by + 1, 0] = halo.recv[WEST]
