"""
Configuration loader for engine comparison experiments.

Loads JSON config files, validates fields and fills defaults for optional
keys.  A config describes which grid sizes to sweep, how many trials to run
per size, which union-find engines to time and the wall-clock budget.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .union_find import EngineKind


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

ConfigDict = dict[str, Any]


# ---------------------------------------------------------------------------
# Schema constants
# ---------------------------------------------------------------------------

ENGINE_NAMES = {kind.value for kind in EngineKind}

DEFAULT_TIME_LIMIT_S = 60.0
DEFAULT_MAX_N_SEARCH: ConfigDict = {
    "enabled": False,
    "naive": [50, 1000, 50],
    "weighted": [100, 2000, 100],
}


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


def load_config(path: str | Path) -> ConfigDict:
    """Load and validate a JSON configuration file.

    Parameters
    ----------
    path : str or Path
        Path to the JSON configuration file.

    Returns
    -------
    ConfigDict
        Validated configuration dictionary with defaults filled in.

    Raises
    ------
    ValueError
        If required fields are missing or values are invalid.
    FileNotFoundError
        If the config file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r") as fh:
        cfg: ConfigDict = json.load(fh)

    return normalise_config(cfg)


def normalise_config(cfg: ConfigDict) -> ConfigDict:
    """Validate ``cfg`` and return a copy with optional keys defaulted."""
    _validate_config(cfg)

    out = dict(cfg)
    out.setdefault("engines", sorted(ENGINE_NAMES))
    out["engines"] = [EngineKind.parse(e).value for e in out["engines"]]
    out.setdefault("seed", None)
    out.setdefault("time_limit_s", DEFAULT_TIME_LIMIT_S)
    search = dict(DEFAULT_MAX_N_SEARCH)
    search.update(out.get("max_n_search") or {})
    out["max_n_search"] = search
    return out


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _validate_config(cfg: ConfigDict) -> None:
    """Validate config fields.

    Raises
    ------
    ValueError
        On any validation failure.
    """
    if not isinstance(cfg, dict):
        raise ValueError(f"Config must be a JSON object, got {type(cfg).__name__}")

    required_top = {"grid_sizes", "trials"}
    missing = required_top - cfg.keys()
    if missing:
        raise ValueError(f"Config missing required fields: {missing}")

    sizes = cfg["grid_sizes"]
    if not isinstance(sizes, list) or not sizes:
        raise ValueError("grid_sizes must be a non-empty list of positive integers")
    bad_sizes = [s for s in sizes if not _is_int(s) or s <= 0]
    if bad_sizes:
        raise ValueError(f"grid_sizes must be positive integers; invalid: {bad_sizes}")

    trials = cfg["trials"]
    if not _is_int(trials) or trials < 2:
        raise ValueError(f"trials must be an integer >= 2, got {trials!r}")

    if "engines" in cfg:
        engines = cfg["engines"]
        if not isinstance(engines, list) or not engines:
            raise ValueError("engines must be a non-empty list")
        unknown = [e for e in engines if str(e).lower() not in ENGINE_NAMES]
        if unknown:
            raise ValueError(
                f"engines must be drawn from {sorted(ENGINE_NAMES)}, got {unknown}"
            )

    seed = cfg.get("seed")
    if seed is not None and (not _is_int(seed) or seed < 0):
        raise ValueError(f"seed must be a non-negative integer or null, got {seed!r}")

    if "time_limit_s" in cfg:
        limit = cfg["time_limit_s"]
        if isinstance(limit, bool) or not isinstance(limit, (int, float)) or limit <= 0:
            raise ValueError(f"time_limit_s must be a positive number, got {limit!r}")

    search = cfg.get("max_n_search")
    if search is not None:
        if not isinstance(search, dict):
            raise ValueError("max_n_search must be an object")
        for name in ENGINE_NAMES & search.keys():
            _validate_range(f"max_n_search.{name}", search[name])


def _validate_range(field: str, value: Any) -> None:
    if (
        not isinstance(value, list)
        or len(value) != 3
        or not all(_is_int(v) and v > 0 for v in value)
    ):
        raise ValueError(
            f"{field} must be [start, stop, step] of positive integers, got {value!r}"
        )
    start, stop, _ = value
    if start > stop:
        raise ValueError(f"{field}: start {start} is greater than stop {stop}")


def build_seed(cfg: ConfigDict) -> int | None:
    """Return the master seed from a config dict (``None`` for fresh entropy)."""
    seed = cfg.get("seed")
    return None if seed is None else int(seed)
