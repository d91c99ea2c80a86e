# -*- coding: utf-8 -*-
"""Simulation driver: setup, iteration loop, output cadence and reduction."""

# Import dataclass for setup and result records.
from dataclasses import dataclass

# Import typing primitives.
from typing import Any, Callable, Dict, List, Optional

# Import logging.
import logging

# Import local modules.
from .config import RunConfig
from .decomposition import LocalBlock, check_divisibility, decompose
from .exchange import HaloExchanger, halo_step
from .grid import DoubleBuffer, allocate_grids, cell_index
from .halo import HaloBuffers, allocate_halo_buffers
from .io_netcdf import SnapshotWriter
from .mpi_utils import allreduce_sum, wtime
from .sources import inject_sources, localize_sources, sources_from_config
from .stencil import update_grid
from .topology import ProcessMesh, build_mesh, check_mesh_shape, format_mesh_row, plan_mesh

# Create a logger for this module.
logger = logging.getLogger("haloheat")

# Signature: (iteration, grid, mesh, block, cell_index, size) -> None
OutputHook = Callable[[int, Any, ProcessMesh, LocalBlock, Callable[..., int], int], None]


@dataclass
class WorkerSetup:
    """Everything a worker builds once before the loop."""

    mesh: ProcessMesh
    block: LocalBlock
    grids: DoubleBuffer
    halo: HaloBuffers
    exchanger: HaloExchanger
    local_sources: List[int]


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of a run on one worker."""

    mesh: ProcessMesh
    block: LocalBlock
    iterations: int
    local_heat: float
    global_heat: float
    elapsed_s: float


def setup_worker(comm: Any, run: RunConfig) -> WorkerSetup:
    """Validate the run, build the mesh, decompose the grid and allocate buffers."""
    size = comm.Get_size()
    # Configuration errors are reported before any communication.
    check_mesh_shape((run.px, run.py), size)
    check_divisibility(run.n, run.px, run.py)

    mesh = build_mesh(comm, (run.px, run.py), run.periods, reorder=run.reorder)
    block = decompose(run.n, run.px, run.py, *mesh.coords)
    logger.debug("%s block=%dx%d offset=(%d,%d)", format_mesh_row(mesh), block.bx, block.by, block.offx, block.offy)

    sources = sources_from_config(run.sources, run.n)
    local_sources = localize_sources(sources, block)

    grids = allocate_grids(block)
    halo = allocate_halo_buffers(block)
    exchanger = HaloExchanger(mesh, halo, tag=run.tag)
    return WorkerSetup(
        mesh=mesh,
        block=block,
        grids=grids,
        halo=halo,
        exchanger=exchanger,
        local_sources=local_sources,
    )


def log_layout(run: RunConfig, size: int) -> None:
    """Log the planned mesh layout, one line per rank (rank0 only)."""
    for planned in plan_mesh(size, (run.px, run.py), run.periods):
        logger.info(format_mesh_row(planned))
    if run.reorder:
        logger.info("Rank reordering enabled: actual ranks may differ from the plan above.")


def output_due(iteration: int, niters: int, every: int) -> bool:
    """Return True at the output cadence and on the final iteration."""
    if every > 0 and iteration % every == 0:
        return True
    return iteration == niters - 1


def step(setup: WorkerSetup, energy: float) -> float:
    """Run one iteration and return the local heat of the updated buffer."""
    grids = setup.grids
    inject_sources(grids.current, setup.local_sources, energy)
    halo_step(grids.current, setup.block, setup.halo, setup.exchanger)
    heat = update_grid(grids.current, grids.next, setup.block)
    grids.swap()
    return heat


def run_simulation(
    comm: Any,
    cfg: Dict[str, Any],
    output_hook: Optional[OutputHook] = None,
) -> SimulationResult:
    """Run the full simulation on every worker of `comm`."""
    run = RunConfig.from_dict(cfg)
    size = comm.Get_size()
    setup = setup_worker(comm, run)
    mesh, block = setup.mesh, setup.block
    mesh_comm = mesh.comm

    if output_hook is None:
        output_hook = SnapshotWriter(cfg, out_stem=run.out_netcdf)

    if mesh.rank == 0:
        logger.info(
            "HALOHEAT start: n=%d energy=%g niters=%d mesh=%dx%d periodic=%s workers=%d",
            run.n,
            run.energy,
            run.niters,
            run.px,
            run.py,
            list(run.periods),
            size,
        )
        log_layout(run, size)

    heat = 0.0
    t1 = wtime()
    for it in range(run.niters):
        heat = step(setup, run.energy)

        if output_due(it, run.niters, run.out_every):
            if mesh.rank == 0:
                logger.info("Outputting state: %d", it)
            output_hook(it, setup.grids.current, mesh, block, cell_index, size)

        if run.log_every > 0 and (it + 1) % run.log_every == 0:
            total = allreduce_sum(mesh_comm, heat)
            if mesh.rank == 0:
                logger.info("iteration=%d heat=%f", it + 1, total)
    t2 = wtime()

    global_heat = allreduce_sum(mesh_comm, heat)
    if mesh.rank == 0:
        logger.info("[%d] last heat: %f time: %f", mesh.rank, global_heat, t2 - t1)

    return SimulationResult(
        mesh=mesh,
        block=block,
        iterations=run.niters,
        local_heat=heat,
        global_heat=global_heat,
        elapsed_s=t2 - t1,
    )
