# -*- coding: utf-8 -*-
"""Configuration handling for HALOHEAT.

The run is configured via:
1) A built-in default dictionary.
2) An optional JSON configuration file merged on top.
3) CLI positionals and overrides (handled in cli.py / main.py).
"""

# Import JSON for reading configuration files.
import json

# Import dataclass for the resolved run configuration.
from dataclasses import dataclass

# Import typing primitives.
from typing import Any, Dict, List, Optional, Tuple

# Import local errors.
from .errors import ConfigurationError


def default_config() -> Dict[str, Any]:
    """Return a complete default configuration dictionary."""
    return {
        "grid": {
            "n": None,
            "energy": None,
            "niters": None,
        },
        "mesh": {
            "px": None,
            "py": None,
            "periodic": [False, False],
            "reorder": False,
        },
        "exchange": {
            "tag": 9,
        },
        # Global [x, y] pairs; None selects the three default sources.
        "sources": None,
        "output": {
            "every": 1000,
            "out_netcdf": None,
            "Conventions": "CF-1.10",
            "title": "HALOHEAT heat diffusion snapshot",
            "institution": "",
        },
        "log_every": 0,
    }


def load_json(path: str) -> Dict[str, Any]:
    """Load a JSON file into a Python dictionary."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def deep_update(base: Dict[str, Any], other: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge dict `other` into dict `base` (non-destructive)."""
    out = dict(base)
    for k, v in other.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_update(out[k], v)  # type: ignore[arg-type]
        else:
            out[k] = v
    return out


def is_complete(cfg: Dict[str, Any]) -> bool:
    """Return True when all five run parameters are set."""
    grid = cfg.get("grid", {})
    mesh = cfg.get("mesh", {})
    values = [grid.get("n"), grid.get("energy"), grid.get("niters"), mesh.get("px"), mesh.get("py")]
    return all(v is not None for v in values)


def _as_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc


@dataclass(frozen=True)
class RunConfig:
    """Resolved run parameters."""

    n: int
    energy: float
    niters: int
    px: int
    py: int
    periods: Tuple[bool, bool]
    reorder: bool
    tag: int
    sources: Optional[List[List[int]]]
    out_every: int
    out_netcdf: Optional[str]
    log_every: int

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "RunConfig":
        """Validate and resolve a merged configuration dictionary."""
        if not is_complete(cfg):
            raise ConfigurationError("n, energy, niters, px and py must all be set", exit_code=0)
        grid = cfg["grid"]
        mesh = cfg["mesh"]
        periodic = mesh.get("periodic", [False, False]) or [False, False]
        if len(periodic) != 2:
            raise ConfigurationError("mesh.periodic must hold two booleans")
        n = _as_int(grid["n"], "n")
        niters = _as_int(grid["niters"], "niters")
        if n <= 0:
            raise ConfigurationError(f"grid size n must be positive, got {n}")
        if niters < 0:
            raise ConfigurationError(f"niters must be non-negative, got {niters}")
        out_cfg = cfg.get("output", {})
        return cls(
            n=n,
            energy=float(grid["energy"]),
            niters=niters,
            px=_as_int(mesh["px"], "px"),
            py=_as_int(mesh["py"], "py"),
            periods=(bool(periodic[0]), bool(periodic[1])),
            reorder=bool(mesh.get("reorder", False)),
            tag=_as_int(cfg.get("exchange", {}).get("tag", 9), "exchange.tag"),
            sources=cfg.get("sources", None),
            out_every=max(0, _as_int(out_cfg.get("every", 1000) or 0, "output.every")),
            out_netcdf=out_cfg.get("out_netcdf", None),
            log_every=max(0, _as_int(cfg.get("log_every", 0) or 0, "log_every")),
        )
