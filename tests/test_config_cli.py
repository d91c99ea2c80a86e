# -*- coding: utf-8 -*-
"""Configuration merging, CLI overrides and the usage exit."""

import json

import pytest

from haloheat.cli import USAGE, apply_overrides, parse_args
from haloheat.config import RunConfig, deep_update, default_config, is_complete, load_json
from haloheat.errors import ConfigurationError


def _cfg(argv):
    return apply_overrides(default_config(), parse_args(argv))


def test_positionals_fill_grid_and_mesh():
    cfg = _cfg(["16", "2", "50", "2", "4"])
    assert cfg["grid"] == {"n": 16, "energy": 2, "niters": 50}
    assert (cfg["mesh"]["px"], cfg["mesh"]["py"]) == (2, 4)
    assert is_complete(cfg)


def test_missing_positionals_are_not_a_parser_error():
    cfg = _cfg(["16", "2"])
    assert not is_complete(cfg)
    with pytest.raises(ConfigurationError) as info:
        RunConfig.from_dict(cfg)
    assert info.value.exit_code == 0


def test_flags_override_config():
    cfg = _cfg(["8", "1", "10", "1", "1", "--periodic-y", "--reorder", "--out-every", "5", "--out-nc", "snap.nc", "--log-every", "2"])
    run = RunConfig.from_dict(cfg)
    assert run.periods == (False, True)
    assert run.reorder is True
    assert run.out_every == 5
    assert run.out_netcdf == "snap.nc"
    assert run.log_every == 2
    assert run.tag == 9
    assert run.sources is None


def test_deep_update_is_non_destructive():
    base = default_config()
    merged = deep_update(base, {"mesh": {"periodic": [True, True]}, "exchange": {"tag": 42}})
    assert merged["mesh"]["periodic"] == [True, True]
    assert merged["mesh"]["reorder"] is False
    assert merged["exchange"]["tag"] == 42
    assert base["mesh"]["periodic"] == [False, False]


def test_json_file_then_cli(tmp_path):
    path = tmp_path / "run.json"
    path.write_text(json.dumps({"grid": {"n": 12, "energy": 5, "niters": 3}, "mesh": {"px": 2, "py": 3}, "sources": [[0, 0]]}))
    cfg = deep_update(default_config(), load_json(str(path)))
    cfg = apply_overrides(cfg, parse_args(["24"]))
    run = RunConfig.from_dict(cfg)
    assert (run.n, run.energy, run.niters, run.px, run.py) == (24, 5.0, 3, 2, 3)
    assert run.sources == [[0, 0]]


def test_invalid_values_raise_configuration_errors():
    cfg = _cfg(["0", "1", "1", "1", "1"])
    with pytest.raises(ConfigurationError):
        RunConfig.from_dict(cfg)
    cfg = deep_update(_cfg(["4", "1", "1", "1", "1"]), {"mesh": {"periodic": [True]}})
    with pytest.raises(ConfigurationError):
        RunConfig.from_dict(cfg)


def test_main_prints_usage_and_exits_zero(capsys):
    from main import main

    assert main(["8", "1"]) == 0
    assert USAGE in capsys.readouterr().out


def test_main_without_mpi_exits_with_runtime_code(monkeypatch):
    from main import main

    monkeypatch.setattr("haloheat.mpi_utils.HAVE_MPI", False)
    monkeypatch.setattr("haloheat.mpi_utils.MPI", None)
    with pytest.raises(SystemExit) as info:
        main(["8", "1", "1", "1", "1"])
    assert info.value.code == 4


def test_configuration_errors_have_their_own_exit_code():
    assert ConfigurationError("bad").exit_code == 5
    assert ConfigurationError("usage", exit_code=0).exit_code == 0
