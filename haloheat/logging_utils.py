# -*- coding: utf-8 -*-
"""Logging setup (rank-aware)."""

# Import logging.
import logging

# Import sys for the stream handler.
import sys


def setup_logging(level: str, rank: int) -> None:
    """Configure the root logger so every line carries the MPI rank."""
    fmt = f"%(asctime)s [rank {rank:d}] %(levelname)s %(name)s: %(message)s"
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=fmt,
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
