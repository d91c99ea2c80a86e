# -*- coding: utf-8 -*-
"""MPI utilities for HALOHEAT.

This module provides:
- MPI import (optional at import time, required to run)
- communicator setup and job-wide abort
- the global heat reduction
- gather of worker blocks to rank0 for output
"""

# Import typing primitives.
from typing import Any, List, Optional, Tuple

# Import sys for serial exits.
import sys

# Import logging for abort diagnostics.
import logging

# Import numpy for block payloads.
import numpy as np

# Import local error taxonomy.
from .errors import HaloheatError


# Try importing mpi4py; pure helpers stay importable without it.
try:
    from mpi4py import MPI  # type: ignore
    HAVE_MPI = True
except Exception:
    MPI = None  # type: ignore
    HAVE_MPI = False

logger = logging.getLogger("haloheat")


def require_mpi() -> None:
    """Raise if mpi4py is unavailable."""
    if not HAVE_MPI:
        raise HaloheatError("mpi4py is required to run HALOHEAT (pip install mpi4py).")


def get_comm() -> tuple[Any, int, int]:
    """Return (comm, rank, size) for COMM_WORLD."""
    require_mpi()
    comm = MPI.COMM_WORLD
    return comm, comm.Get_rank(), comm.Get_size()


def abort_run(comm: Any, exit_code: int) -> None:
    """Terminate every worker of the job with `exit_code`.

    A single worker exits normally; otherwise COMM_WORLD is aborted so that
    no peer keeps waiting on a halo operation that will never complete.
    """
    world = MPI.COMM_WORLD if HAVE_MPI else None
    if world is None or world.Get_size() <= 1:
        sys.exit(exit_code)
    logger.error("Aborting MPI job with exit code %d", exit_code)
    world.Abort(exit_code)


def wtime() -> float:
    """Return MPI wall-clock time in seconds."""
    return float(MPI.Wtime())


def allreduce_sum(comm: Any, value: float) -> float:
    """Sum a per-worker scalar across the communicator."""
    if comm is None:
        return float(value)
    return float(comm.allreduce(float(value), op=MPI.SUM))


def gather_blocks_to_rank0(
    comm: Any, interior: np.ndarray, offset: Tuple[int, int], n: int
) -> Optional[np.ndarray]:
    """Assemble every worker's interior block into a full (n, n) array on rank0.

    Blocks are shipped with their global offsets (pickle-based gather), so the
    result is independent of how ranks were ordered in the mesh.
    """
    payload = (int(offset[0]), int(offset[1]), np.ascontiguousarray(interior, dtype=np.float64))
    if comm is None:
        parts: Optional[List[Any]] = [payload]
    else:
        parts = comm.gather(payload, root=0)
    if parts is None:
        return None
    full = np.zeros((n, n), dtype=np.float64)
    for offx, offy, block in parts:
        by, bx = block.shape
        full[offy:offy + by, offx:offx + bx] = block
    return full
