#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""HALOHEAT entry point.

This file is intentionally small:
- parse CLI
- load+merge configuration
- initialize MPI
- run the simulation, aborting the whole job on fatal errors

All real logic lives in the `haloheat/` package.

Example:
    mpirun -n 4 python main.py 1024 1 5000 2 2
"""

# Import logging (for module-level logger).
import logging

# Import stdlib helpers.
import importlib.util
import sys
from typing import List, Optional

# Import lightweight config helpers early for shared utilities.
from haloheat.config import deep_update, default_config, is_complete, load_json


def _require_numpy() -> None:
    """Validate that NumPy is available before importing HALOHEAT modules."""
    if importlib.util.find_spec("numpy") is None:
        raise ModuleNotFoundError(
            "NumPy is required to run HALOHEAT. Activate your virtual environment "
            f"or install it with '{sys.executable} -m pip install numpy'."
        )


def main(argv: Optional[List[str]] = None) -> int:
    """Program entry point; returns the process exit code."""
    _require_numpy()

    # Import CLI parser.
    from haloheat.cli import USAGE, apply_overrides, parse_args

    # Import logging configuration.
    from haloheat.logging_utils import setup_logging

    # Import MPI utilities and error taxonomy.
    from haloheat.errors import EXIT_RUNTIME, HaloheatError
    from haloheat.mpi_utils import HAVE_MPI, MPI, abort_run, get_comm

    # Import simulation driver.
    from haloheat.simulation import run_simulation

    # Parse command-line arguments into a structured namespace.
    args = parse_args(argv)

    # Defaults, then the optional JSON file, then explicit CLI values.
    cfg = default_config()
    if args.config is not None:
        cfg = deep_update(cfg, load_json(args.config))
    cfg = apply_overrides(cfg, args)

    # Missing run parameters: usage only, benign exit.
    if not is_complete(cfg):
        world_rank = MPI.COMM_WORLD.Get_rank() if HAVE_MPI else 0
        if world_rank == 0:
            print(USAGE)
        return 0

    # Messaging errors only exist when mpi4py imported.
    mpi_errors = (MPI.Exception,) if HAVE_MPI else ()

    comm = None
    logger = logging.getLogger("haloheat")
    try:
        comm, rank, size = get_comm()

        # Configure logging (include rank so MPI logs are distinguishable).
        setup_logging(args.log_level, rank)

        run_simulation(comm, cfg)
    except HaloheatError as exc:
        logger.error("%s", exc)
        abort_run(comm, exc.exit_code)
        return exc.exit_code
    except MemoryError:
        logger.exception("Buffer allocation failed")
        abort_run(comm, EXIT_RUNTIME)
        return EXIT_RUNTIME
    except mpi_errors as exc:
        logger.error("Messaging failure: %s", exc)
        abort_run(comm, EXIT_RUNTIME)
        return EXIT_RUNTIME
    except Exception:
        # Any other failure on one worker still has to stop its peers.
        logger.exception("Unexpected failure")
        abort_run(comm, EXIT_RUNTIME)
        return EXIT_RUNTIME
    return 0


if __name__ == "__main__":
    sys.exit(main())
