# -*- coding: utf-8 -*-
"""Error taxonomy for HALOHEAT.

Every error here is fatal: the driver logs it and aborts the whole MPI job
with the attached exit code.
"""

# Exit code for allocation, messaging and other runtime failures.
EXIT_RUNTIME = 4

# Exit code for an invalid configuration (bad sources, sizes, periodicity).
EXIT_CONFIG = 5


class HaloheatError(Exception):
    """Base class for fatal HALOHEAT errors."""

    exit_code = EXIT_RUNTIME

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = int(exit_code)


class ConfigurationError(HaloheatError, ValueError):
    """Invalid run configuration, detected once at setup."""

    exit_code = EXIT_CONFIG


class MeshShapeError(ConfigurationError):
    """Requested mesh shape does not match the number of workers."""

    exit_code = 1


class GridDivisibilityError(ConfigurationError):
    """Grid size is not divisible by one of the mesh dimensions."""

    exit_code = 2
