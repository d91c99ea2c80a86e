# -*- coding: utf-8 -*-
"""MPI path on a single process (COMM_SELF): mesh, exchange and full runs."""

import numpy as np
import pytest

from haloheat.mpi_utils import HAVE_MPI

pytestmark = pytest.mark.skipif(not HAVE_MPI, reason="mpi4py not available")

from haloheat.config import RunConfig, deep_update, default_config  # noqa: E402
from haloheat.decomposition import decompose  # noqa: E402
from haloheat.errors import MeshShapeError  # noqa: E402
from haloheat.exchange import HaloExchanger, halo_step  # noqa: E402
from haloheat.grid import as_2d, interior  # noqa: E402
from haloheat.halo import allocate_halo_buffers  # noqa: E402
from haloheat.io_netcdf import SnapshotWriter, load_snapshot_netcdf  # noqa: E402
from haloheat.simulation import output_due, run_simulation, setup_worker, step  # noqa: E402
from haloheat.topology import build_mesh, coordinates  # noqa: E402


def _comm():
    from mpi4py import MPI

    return MPI.COMM_SELF


def _run_cfg(n, energy, niters, periodic=(False, False), **extra):
    cfg = default_config()
    cfg["grid"].update({"n": n, "energy": energy, "niters": niters})
    cfg["mesh"].update({"px": 1, "py": 1, "periodic": list(periodic)})
    return deep_update(cfg, extra)


def test_single_worker_mesh_has_no_neighbors():
    mesh = build_mesh(_comm(), (1, 1), (False, False))
    assert mesh.coords == (0, 0)
    assert mesh.neighbors() == {"north": None, "south": None, "east": None, "west": None}
    assert coordinates(mesh, 0) == (0, 0)


def test_periodic_single_worker_is_its_own_neighbor():
    mesh = build_mesh(_comm(), (1, 1), (True, True))
    assert set(mesh.neighbors().values()) == {mesh.rank}


def test_build_mesh_rejects_wrong_shape_before_communicating():
    with pytest.raises(MeshShapeError):
        build_mesh(_comm(), (2, 1), (False, False))


def test_periodic_self_exchange_fills_ghosts_with_opposite_boundary():
    block = decompose(6, 1, 1, 0, 0)
    mesh = build_mesh(_comm(), (1, 1), (True, True))
    halo = allocate_halo_buffers(block)
    exchanger = HaloExchanger(mesh, halo)
    grid = np.arange(block.padded_size, dtype=np.float64) + 0.25
    halo_step(grid, block, halo, exchanger)
    a = as_2d(grid, block)
    bx, by = block.bx, block.by
    np.testing.assert_array_equal(a[0, 1:bx + 1], a[by, 1:bx + 1])
    np.testing.assert_array_equal(a[by + 1, 1:bx + 1], a[1, 1:bx + 1])
    np.testing.assert_array_equal(a[1:by + 1, 0], a[1:by + 1, bx])
    np.testing.assert_array_equal(a[1:by + 1, bx + 1], a[1:by + 1, 1])


def test_missing_neighbors_leave_ghosts_untouched():
    block = decompose(4, 1, 1, 0, 0)
    mesh = build_mesh(_comm(), (1, 1), (False, False))
    halo = allocate_halo_buffers(block)
    exchanger = HaloExchanger(mesh, halo)
    assert exchanger.missing == ["north", "south", "east", "west"]
    grid = np.ones(block.padded_size)
    as_2d(grid, block)[0, :] = -1.0
    before = grid.copy()
    halo_step(grid, block, halo, exchanger)
    np.testing.assert_array_equal(grid, before)


def test_tags_pair_each_send_with_the_opposite_receive():
    block = decompose(4, 1, 1, 0, 0)
    exchanger = HaloExchanger(build_mesh(_comm(), (1, 1), (True, True)), allocate_halo_buffers(block), tag=20)
    assert exchanger.send_tag("north") == exchanger.recv_tag("south") == 20
    assert exchanger.send_tag("west") == exchanger.recv_tag("east") == 23


def test_heat_is_conserved_without_injection_on_a_periodic_mesh():
    run = RunConfig.from_dict(_run_cfg(6, 0, 1, periodic=(True, True), sources=[]))
    setup = setup_worker(_comm(), run)
    rng = np.random.default_rng(7)
    field = rng.random((setup.block.by, setup.block.bx))
    interior(setup.grids.current, setup.block)[...] = field
    interior(setup.grids.next, setup.block)[...] = field
    previous = float(field.sum())
    for _ in range(25):
        heat = step(setup, 0.0)
        assert heat <= previous + 1e-9
        previous = heat
    assert previous == pytest.approx(float(field.sum()), rel=1e-9)


def test_single_worker_run_matches_expected_heat():
    result = run_simulation(_comm(), _run_cfg(8, 1, 1), output_hook=lambda *args: None)
    assert result.iterations == 1
    assert result.local_heat == pytest.approx(1.375)
    assert result.global_heat == pytest.approx(1.375)
    assert (result.block.bx, result.block.by) == (8, 8)


def test_output_cadence():
    assert output_due(0, 10, 1000)
    assert output_due(9, 10, 1000)
    assert not output_due(5, 10, 1000)
    assert output_due(4, 10, 2)
    assert not output_due(3, 10, 0)


def test_output_hook_receives_the_updated_buffer():
    calls = []

    def hook(iteration, grid, mesh, block, cell_index, size):
        calls.append((iteration, float(interior(grid, block).sum()), size, cell_index(1, 1, block.bx)))

    result = run_simulation(_comm(), _run_cfg(8, 1, 3, output={"every": 2}), output_hook=hook)
    assert [c[0] for c in calls] == [0, 2]
    assert calls[-1][1] == pytest.approx(result.local_heat)
    assert calls[0][2] == 1
    assert calls[0][3] == 11


def test_snapshot_writer_round_trip(tmp_path):
    pytest.importorskip("netCDF4")
    stem = str(tmp_path / "heat.nc")
    cfg = _run_cfg(8, 1, 2, output={"every": 1, "out_netcdf": stem})
    writer = SnapshotWriter(cfg, out_stem=stem)
    run_simulation(_comm(), cfg, output_hook=writer)
    assert [p.rsplit("_", 1)[-1] for p in writer.written] == ["000000.nc", "000001.nc"]
    field = load_snapshot_netcdf(writer.written[-1])
    np.testing.assert_allclose(field, writer.last_field)
    assert field.shape == (8, 8)


def test_snapshot_writer_without_path_skips_the_gather(monkeypatch):
    def no_gather(*args, **kwargs):
        raise AssertionError("gather must not run without an output path")

    monkeypatch.setattr("haloheat.io_netcdf.gather_blocks_to_rank0", no_gather)
    cfg = _run_cfg(8, 1, 3, output={"every": 1})
    writer = SnapshotWriter(cfg)
    run_simulation(_comm(), cfg, output_hook=writer)
    assert writer.last_field is None
    assert writer.written == []
