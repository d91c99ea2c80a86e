# -*- coding: utf-8 -*-
"""Padded buffers, the tagged double buffer, and halo pack/unpack."""

import numpy as np
import pytest

from haloheat.decomposition import decompose
from haloheat.grid import allocate_grids, as_2d, cell_index, interior
from haloheat.halo import DIRECTIONS, EAST, NORTH, OPPOSITE, SOUTH, WEST, allocate_halo_buffers, pack, unpack


def _filled(block):
    grid = np.arange(block.padded_size, dtype=np.float64) * 0.1 + 0.5
    return grid


def test_cell_index_row_major_with_ghost_padding():
    assert cell_index(0, 0, 4) == 0
    assert cell_index(1, 1, 4) == 7
    assert cell_index(5, 2, 4) == 2 * 6 + 5


@pytest.mark.parametrize("x,y", [(-1, 0), (6, 1), (0, -1), (0, 6)])
def test_cell_index_bounds(x, y):
    with pytest.raises(IndexError):
        cell_index(x, y, 4, 4)


def test_as_2d_matches_cell_index():
    block = decompose(8, 2, 4, 0, 0)
    grid = _filled(block)
    view = as_2d(grid, block)
    assert view.shape == (block.by + 2, block.bx + 2)
    for x, y in [(0, 0), (1, 2), (block.bx + 1, block.by + 1)]:
        assert view[y, x] == grid[cell_index(x, y, block.bx, block.by)]
    assert interior(grid, block).shape == (block.by, block.bx)


def test_double_buffer_swaps_roles_without_copying():
    block = decompose(4, 1, 1, 0, 0)
    grids = allocate_grids(block)
    first, second = grids.current, grids.next
    assert first is not second
    grids.swap()
    assert grids.current is second and grids.next is first
    grids.swap()
    assert grids.current is first
    assert grids.swaps == 2


def test_halo_buffer_sizes():
    block = decompose(12, 3, 2, 0, 0)
    halo = allocate_halo_buffers(block)
    assert halo.send[NORTH].size == block.bx == halo.recv[SOUTH].size
    assert halo.send[EAST].size == block.by == halo.recv[WEST].size
    for d in DIRECTIONS:
        assert halo.send[d] is not halo.recv[d]


def test_pack_extracts_interior_boundary_lines():
    block = decompose(12, 3, 2, 0, 0)
    grid = _filled(block)
    halo = allocate_halo_buffers(block)
    pack(grid, block, halo)
    a = as_2d(grid, block)
    bx, by = block.bx, block.by
    np.testing.assert_array_equal(halo.send[NORTH], a[1, 1:bx + 1])
    np.testing.assert_array_equal(halo.send[SOUTH], a[by, 1:bx + 1])
    np.testing.assert_array_equal(halo.send[EAST], a[1:by + 1, bx])
    np.testing.assert_array_equal(halo.send[WEST], a[1:by + 1, 1])


def test_self_loop_round_trip_fills_ghosts_exactly():
    # A worker wrapped onto itself receives its own opposite boundary.
    block = decompose(6, 1, 1, 0, 0)
    grid = _filled(block)
    halo = allocate_halo_buffers(block)
    pack(grid, block, halo)
    for d in DIRECTIONS:
        halo.recv[d][:] = halo.send[OPPOSITE[d]]
    unpack(grid, block, halo)
    a = as_2d(grid, block)
    bx, by = block.bx, block.by
    np.testing.assert_array_equal(a[0, 1:bx + 1], a[by, 1:bx + 1])
    np.testing.assert_array_equal(a[by + 1, 1:bx + 1], a[1, 1:bx + 1])
    np.testing.assert_array_equal(a[1:by + 1, 0], a[1:by + 1, bx])
    np.testing.assert_array_equal(a[1:by + 1, bx + 1], a[1:by + 1, 1])


def test_unpack_leaves_skipped_sides_and_corners_untouched():
    block = decompose(4, 1, 1, 0, 0)
    grid = np.zeros(block.padded_size)
    halo = allocate_halo_buffers(block)
    for d in DIRECTIONS:
        halo.recv[d][:] = 7.0
    unpack(grid, block, halo, skip=[NORTH, WEST])
    a = as_2d(grid, block)
    assert np.all(a[0, :] == 0.0)
    assert np.all(a[:, 0] == 0.0)
    assert np.all(a[block.by + 1, 1:block.bx + 1] == 7.0)
    assert np.all(a[1:block.by + 1, block.bx + 1] == 7.0)
    assert a[block.by + 1, block.bx + 1] == 0.0
    # Interior is never written by unpack.
    assert np.all(interior(grid, block) == 0.0)
