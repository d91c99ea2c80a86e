# -*- coding: utf-8 -*-
"""NetCDF snapshots of the global temperature field (rank0)."""

# Import JSON for embedding config as provenance attribute.
import json

# Import datetime utilities for the history attribute.
from datetime import datetime, timezone

# Import pathlib for snapshot naming.
from pathlib import Path

# Import typing primitives.
from typing import Any, Callable, Dict, Optional

# Import logging.
import logging

# Import numpy.
import numpy as np

# Import xarray.
import xarray as xr

# Import local modules.
from .decomposition import LocalBlock
from .grid import interior
from .mpi_utils import gather_blocks_to_rank0
from .topology import ProcessMesh

logger = logging.getLogger("haloheat")


def utc_now_iso() -> str:
    """Return current UTC time as an ISO-8601 string with 'Z'."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def snapshot_path(stem: str, iteration: int) -> str:
    """Return '<stem>_<iteration:06d><suffix>' (suffix defaults to .nc)."""
    p = Path(str(stem))
    suffix = p.suffix or ".nc"
    return str(p.with_name(f"{p.stem}_{iteration:06d}{suffix}"))


def write_snapshot_netcdf_rank0(
    out_path: str, cfg: Dict[str, Any], temperature: np.ndarray, iteration: int, mesh_dims: tuple
) -> None:
    """Write one full-grid temperature snapshot in CF-friendly NetCDF."""
    out_cfg = cfg.get("output", {})
    ny, nx = temperature.shape

    ds = xr.Dataset()
    ds = ds.assign_coords({
        "iteration": xr.DataArray(np.array([iteration], dtype=np.int64), dims=("iteration",), attrs={"long_name": "iteration"}),
        "y": xr.DataArray(np.arange(ny, dtype=np.int32), dims=("y",), attrs={"long_name": "grid row", "units": "1"}),
        "x": xr.DataArray(np.arange(nx, dtype=np.int32), dims=("x",), attrs={"long_name": "grid column", "units": "1"}),
    })
    ds["temperature"] = xr.DataArray(
        temperature.astype(np.float64)[None, ...],
        dims=("iteration", "y", "x"),
        attrs={"long_name": "temperature", "units": "1"},
    )

    ds.attrs["title"] = out_cfg.get("title", "HALOHEAT heat diffusion snapshot")
    ds.attrs["institution"] = out_cfg.get("institution", "")
    ds.attrs["source"] = "HALOHEAT"
    ds.attrs["history"] = f"{utc_now_iso()}: snapshot written by HALOHEAT"
    ds.attrs["Conventions"] = out_cfg.get("Conventions", "CF-1.10")
    ds.attrs["mesh_px"] = int(mesh_dims[0])
    ds.attrs["mesh_py"] = int(mesh_dims[1])
    ds.attrs["haloheat_config_json"] = json.dumps(cfg, separators=(",", ":"), sort_keys=True, default=str)

    ds.to_netcdf(out_path)


def load_snapshot_netcdf(path: str) -> np.ndarray:
    """Load the (y, x) temperature field of a snapshot."""
    with xr.open_dataset(path) as ds:
        return np.asarray(ds["temperature"].values)[0].astype(np.float64)


class SnapshotWriter:
    """Output collaborator: gathers every block to rank0 and writes a snapshot.

    Called as ``writer(iteration, grid, mesh, block, cell_index, size)``.
    Without an output path the hook does nothing, so no collective runs. The
    last assembled field is kept in ``last_field`` on rank0.
    """

    def __init__(self, cfg: Dict[str, Any], out_stem: Optional[str] = None) -> None:
        self.cfg = cfg
        self.out_stem = out_stem
        self.last_field: Optional[np.ndarray] = None
        self.written: list[str] = []

    def __call__(
        self,
        iteration: int,
        grid: np.ndarray,
        mesh: ProcessMesh,
        block: LocalBlock,
        cell_index: Callable[..., int],
        size: int,
    ) -> None:
        if not self.out_stem:
            return
        full = gather_blocks_to_rank0(mesh.comm, interior(grid, block), (block.offx, block.offy), block.n)
        if mesh.rank != 0 or full is None:
            return
        self.last_field = full
        path = snapshot_path(self.out_stem, iteration)
        write_snapshot_netcdf_rank0(path, self.cfg, full, iteration, mesh.dims)
        self.written.append(path)
        logger.info("Snapshot written: %s (workers=%d)", path, size)
