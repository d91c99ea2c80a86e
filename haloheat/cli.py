# -*- coding: utf-8 -*-
"""Command line interface for HALOHEAT."""

# Import argparse for CLI parsing.
import argparse

# Import typing primitives.
from typing import Any, Dict, List, Optional

USAGE = "usage: haloheat <n> <energy> <niters> <px> <py>"

POSITIONALS = (
    ("n", "Global grid size (n x n)."),
    ("energy", "Energy injected at each heat source every iteration."),
    ("niters", "Number of iterations."),
    ("px", "Workers along x (mesh width)."),
    ("py", "Workers along y (mesh height)."),
)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    ap = argparse.ArgumentParser(prog="haloheat", description="Distributed 2D heat diffusion with halo exchange.")
    # Positionals are optional here so that missing values give the benign usage exit.
    for name, help_text in POSITIONALS:
        ap.add_argument(name, nargs="?", type=int, default=None, help=help_text)
    ap.add_argument("--config", default=None, help="Optional JSON configuration file.")
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    ap.add_argument("--periodic-x", action="store_true", help="Wrap the mesh along x.")
    ap.add_argument("--periodic-y", action="store_true", help="Wrap the mesh along y.")
    ap.add_argument("--reorder", action="store_true", help="Let MPI reorder ranks in the mesh.")
    ap.add_argument("--out-every", default=None, type=int, help="Output cadence in iterations (0 disables).")
    ap.add_argument("--out-nc", default=None, help="NetCDF snapshot path stem (rank 0 only).")
    ap.add_argument("--log-every", default=None, type=int, help="Log global heat every K iterations.")
    return ap


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


def apply_overrides(cfg: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Apply explicitly supplied CLI values onto a merged config (in place)."""
    grid = cfg.setdefault("grid", {})
    mesh = cfg.setdefault("mesh", {})
    output = cfg.setdefault("output", {})
    for key in ("n", "energy", "niters"):
        if getattr(args, key) is not None:
            grid[key] = getattr(args, key)
    for key in ("px", "py"):
        if getattr(args, key) is not None:
            mesh[key] = getattr(args, key)
    if args.periodic_x or args.periodic_y:
        periodic = list(mesh.get("periodic", [False, False]))
        periodic[0] = periodic[0] or args.periodic_x
        periodic[1] = periodic[1] or args.periodic_y
        mesh["periodic"] = periodic
    if args.reorder:
        mesh["reorder"] = True
    if args.out_every is not None:
        output["every"] = args.out_every
    if args.out_nc is not None:
        output["out_netcdf"] = args.out_nc
    if args.log_every is not None:
        cfg["log_every"] = args.log_every
    return cfg
