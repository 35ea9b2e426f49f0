"""
Configuration file support.

Parameters can be stored in a TOML file under a [pyin] table whose keys
are PyinParameters field names:

    [pyin]
    pitch_floor = 60.0
    pitch_ceiling = 1000.0
    emphasis = 0.3

Lookup order:
    1. Explicit path argument
    2. PYINTRACK_CONFIG environment variable
    3. ./pyintrack.toml (project-local config)
    4. ~/.pyintrack/config.toml (user config)

With no config file the stock defaults are used. The hop length given by
the caller always overrides the file.
"""

import logging
import os
import warnings
from dataclasses import fields
from pathlib import Path
from typing import Optional, Union

from .params import PyinParameters, InvalidParameters, default_parameters

logger = logging.getLogger(__name__)

ENV_VAR = "PYINTRACK_CONFIG"

_FIELD_TYPES = {f.name: f.type for f in fields(PyinParameters)}


def find_config_file(path: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """
    Locate the configuration file to use.

    Args:
        path: Explicit config path (takes priority)

    Returns:
        Path to the config file, or None if no file applies

    Raises:
        FileNotFoundError: If an explicit or environment path does not exist
    """
    if path is None:
        path = os.environ.get(ENV_VAR) or None

    if path is not None:
        path = Path(path).expanduser()
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {path}")
        return path

    local_config = Path("pyintrack.toml")
    if local_config.is_file():
        return local_config

    user_config = Path.home() / ".pyintrack" / "config.toml"
    if user_config.is_file():
        return user_config

    return None


def _load_toml(path: Path) -> dict:
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib

    with open(path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise InvalidParameters(f"Malformed config file {path}: {e}") from e


def _coerce(name: str, value):
    kind = _FIELD_TYPES[name]
    if kind in (int, "int"):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidParameters(f"Config key '{name}' must be an integer, got {value!r}")
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidParameters(f"Config key '{name}' must be a number, got {value!r}")
    return float(value)


def load_parameters(
    hop_length: int,
    path: Optional[Union[str, Path]] = None
) -> PyinParameters:
    """
    Build parameters from the configuration file, if any.

    Args:
        hop_length: Frame step in samples (overrides the file)
        path: Explicit config path

    Returns:
        Validated PyinParameters

    Raises:
        FileNotFoundError: If an explicit or environment path does not exist
        InvalidParameters: If the file is malformed or values are invalid
    """
    params = default_parameters(hop_length)

    config_path = find_config_file(path)
    if config_path is None:
        return params

    table = _load_toml(config_path).get("pyin", {})
    if not isinstance(table, dict):
        raise InvalidParameters(f"[pyin] in {config_path} must be a table")

    changes = {}
    for key, value in table.items():
        if key not in _FIELD_TYPES:
            warnings.warn(f"Ignoring unknown config key '{key}' in {config_path}")
            continue
        if key == "hop_length":
            continue
        changes[key] = _coerce(key, value)

    logger.debug("Loaded %d parameter(s) from %s", len(changes), config_path)
    return params.replace(**changes)
