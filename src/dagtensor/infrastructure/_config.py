"""
Runtime configuration for dagtensor.

Configuration is resolved once at import time and can be reloaded or adjusted
at runtime:

1. Defaults (`float32`, `cpu`, `WARNING`).
2. A YAML file named by the ``DAGTENSOR_CONFIG`` environment variable
   (defaults to ``dagtensor_config.yaml`` in the working directory). A missing
   file simply means defaults.
3. Environment overrides: ``DAGTENSOR_DTYPE``, ``DAGTENSOR_DEVICE`` and
   ``DAGTENSOR_LOG_LEVEL`` (environment wins over the file).

Example file::

    default_dtype: float64
    default_device: cpu
    log_level: INFO
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import numpy as np
import yaml

from ..domain.device._device import Device, as_device

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "DAGTENSOR_CONFIG"
DEFAULT_CONFIG_PATH = "dagtensor_config.yaml"

_ENV_OVERRIDES = {
    "default_dtype": "DAGTENSOR_DTYPE",
    "default_device": "DAGTENSOR_DEVICE",
    "log_level": "DAGTENSOR_LOG_LEVEL",
}

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def validate_dtype(dtype: Any) -> np.dtype:
    """
    Validate and normalize an element dtype.

    Parameters
    ----------
    dtype : Any
        Anything accepted by `numpy.dtype` (e.g. ``"float32"``, ``np.int64``).

    Returns
    -------
    np.dtype
        The normalized dtype.

    Raises
    ------
    TypeError
        If the dtype is not a real numeric (integer or floating) type.
    """
    try:
        dt = np.dtype(dtype)
    except TypeError as exc:
        raise TypeError(f"Unsupported dtype {dtype!r}") from exc
    if dt == np.bool_ or not np.issubdtype(dt, np.number):
        raise TypeError(f"dtype must be an integer or floating type, got {dt}")
    if np.issubdtype(dt, np.complexfloating):
        raise TypeError(f"complex dtypes are not supported, got {dt}")
    return dt


@dataclass(frozen=True)
class Config:
    """
    Resolved runtime configuration.

    Attributes
    ----------
    default_dtype : str
        Element dtype for tensors created without an explicit dtype.
    default_device : str
        Device string for tensors created without an explicit device.
    log_level : str
        Level used by `configure_logging` when none is given.
    """

    default_dtype: str = "float32"
    default_device: str = "cpu"
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        try:
            validate_dtype(self.default_dtype)
        except TypeError as exc:
            raise ValueError(str(exc)) from exc
        as_device(self.default_device)
        if str(self.log_level).upper() not in _LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {_LOG_LEVELS}, got {self.log_level!r}"
            )
        object.__setattr__(self, "log_level", str(self.log_level).upper())


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Config file {path} must contain a mapping")
    return dict(data)


def load_config(path: Optional[Union[str, Path]] = None) -> Config:
    """
    Load configuration from YAML and environment, and make it current.

    Parameters
    ----------
    path : str | Path, optional
        Config file to read. Defaults to ``$DAGTENSOR_CONFIG`` or
        ``dagtensor_config.yaml``.

    Returns
    -------
    Config
        The newly active configuration.

    Raises
    ------
    ValueError
        If a value (dtype, device, log level) is invalid.
    """
    global _CONFIG

    cfg_path = Path(path or os.getenv(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))
    raw = _read_yaml(cfg_path)

    known = {f.name for f in fields(Config)}
    values: dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            logger.warning("Ignoring unknown config key %r in %s", key, cfg_path)
            continue
        values[key] = str(value)

    for key, env_name in _ENV_OVERRIDES.items():
        env_value = os.getenv(env_name)
        if env_value:
            values[key] = env_value

    _CONFIG = Config(**values)
    return _CONFIG


def get_config() -> Config:
    """
    Return the active configuration.
    """
    return _CONFIG


def get_default_dtype() -> np.dtype:
    """
    Return the dtype used for tensors created without an explicit dtype.
    """
    return np.dtype(_CONFIG.default_dtype)


def set_default_dtype(dtype: Any) -> None:
    """
    Change the default element dtype.

    Raises
    ------
    TypeError
        If `dtype` is not an integer or floating type.
    """
    global _CONFIG
    dt = validate_dtype(dtype)
    _CONFIG = replace(_CONFIG, default_dtype=dt.name)


def get_default_device() -> Device:
    """
    Return the device used for tensors created without an explicit device.
    """
    return as_device(_CONFIG.default_device)


_CONFIG: Config = Config()
load_config()
