#!/usr/bin/env python3
"""
utils/plot_heat.py

Render HALOHEAT temperature snapshots (temperature(iteration, y, x)) as PNG.

What it does:
- Loads one or more snapshot NetCDF files written by the HALOHEAT driver.
- Optionally draws the process-mesh block boundaries (mesh_px / mesh_py attrs).
- Supports percentile-based clipping and log scaling for better contrast.
- Writes one PNG per snapshot into an output directory.

Dependencies:
- Required: matplotlib, numpy, xarray
- Recommended: netCDF4 (backend)
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

import numpy as np
import xarray as xr
import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
from matplotlib.colors import LogNorm

LOG = logging.getLogger("plot_heat")


def _percentile_vmax(data: np.ndarray, p: float) -> float:
    """Compute percentile-based vmax on finite values."""
    flat = data[np.isfinite(data)]
    if flat.size == 0:
        return 0.0
    return float(np.percentile(flat, p))


def _draw_mesh(ax, n: int, px: int, py: int) -> None:
    """Overlay block boundaries of a px x py mesh on an n x n grid."""
    for i in range(1, px):
        ax.axvline(i * n / px - 0.5, color="white", linewidth=0.6, alpha=0.7)
    for j in range(1, py):
        ax.axhline(j * n / py - 0.5, color="white", linewidth=0.6, alpha=0.7)


def plot_one(
    path: str,
    out_png: str,
    cmap: str,
    vmax: Optional[float],
    vmax_percentile: Optional[float],
    log_scale: bool,
    draw_mesh: bool,
    dpi: int,
) -> None:
    """Render one snapshot to PNG."""
    with xr.open_dataset(path) as ds:
        field = np.asarray(ds["temperature"].values, dtype=float)[0]
        iteration = int(ds["iteration"].values[0])
        px = int(ds.attrs.get("mesh_px", 1))
        py = int(ds.attrs.get("mesh_py", 1))

    if vmax is None and vmax_percentile is not None:
        vmax = _percentile_vmax(field, vmax_percentile)
    if vmax is None or not np.isfinite(vmax) or vmax <= 0:
        vmax = 1e-3
        LOG.warning("Using fallback vmax=%s for %s (field may be empty).", vmax, path)

    fig, ax = plt.subplots(figsize=(8, 7))
    if log_scale:
        masked = np.where(field > 0, field, np.nan)
        im = ax.imshow(masked, cmap=cmap, origin="upper", norm=LogNorm(vmin=max(vmax * 1e-6, 1e-12), vmax=vmax))
        fig.colorbar(im, ax=ax, label="temperature [log]")
    else:
        im = ax.imshow(field, cmap=cmap, origin="upper", vmin=0.0, vmax=vmax)
        fig.colorbar(im, ax=ax, label="temperature")

    if draw_mesh:
        _draw_mesh(ax, field.shape[0], px, py)

    ax.set_title(f"HALOHEAT temperature - iteration {iteration} (mesh {px}x{py})")
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    plt.tight_layout()

    Path(out_png).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_png, dpi=dpi)
    plt.close(fig)
    LOG.info("Saved figure: %s", out_png)


def main() -> int:
    ap = argparse.ArgumentParser(description="Plot HALOHEAT temperature snapshots.")
    ap.add_argument("snapshots", nargs="+", help="Snapshot NetCDF paths.")
    ap.add_argument("--out-dir", default="plots", help="Directory for PNG frames.")
    ap.add_argument("--cmap", default="inferno", help="Colormap.")
    ap.add_argument("--vmax", type=float, default=None, help="Linear max temperature.")
    ap.add_argument("--vmax-percentile", type=float, default=99.5, help="Percentile vmax if --vmax not set.")
    ap.add_argument("--log-scale", action="store_true", help="Use log scaling.")
    ap.add_argument("--mesh", action="store_true", help="Draw process-mesh block boundaries.")
    ap.add_argument("--dpi", type=int, default=150, help="PNG DPI.")
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = ap.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s: %(message)s")

    paths: List[str] = sorted(args.snapshots)
    for path in paths:
        out_png = str(Path(args.out_dir) / f"{Path(path).stem}.png")
        plot_one(
            path=path,
            out_png=out_png,
            cmap=args.cmap,
            vmax=args.vmax,
            vmax_percentile=args.vmax_percentile,
            log_scale=args.log_scale,
            draw_mesh=args.mesh,
            dpi=args.dpi,
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
