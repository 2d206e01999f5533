"""
Process-wide settings for gittar.

Transport options are read from an optional YAML file in the platformdirs
user config directory (or the file named by GITTAR_CONFIG_FILE), then
overridden by environment variables:

    request_timeout: 30     # seconds; unset means no timeout
    connect_retries: 2      # connection-level retries per request
    backoff_factor: 0.3
    log_level: DEBUG
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import platformdirs
import yaml

from gittar.constants import (
    APP_NAME,
    CONFIG_FILE_ENV_VAR,
    CONFIG_FILE_NAME,
    CONNECT_RETRIES_ENV_VAR,
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_CONNECT_RETRIES,
    DEFAULT_REQUEST_TIMEOUT,
    REQUEST_TIMEOUT_ENV_VAR,
)
from gittar.exceptions import ConfigurationError
from gittar.log_utils import logger


@dataclass(frozen=True)
class Settings:
    """Transport and logging settings shared by every fetch in the process."""

    request_timeout: Optional[float] = DEFAULT_REQUEST_TIMEOUT
    connect_retries: int = DEFAULT_CONNECT_RETRIES
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR
    log_level: Optional[str] = None


def get_config_file() -> str:
    """
    Return the settings file path.

    Returns:
        str: The path named by GITTAR_CONFIG_FILE, or gittar.yaml inside the platformdirs user config directory.
    """
    override = os.environ.get(CONFIG_FILE_ENV_VAR, "").strip()
    if override:
        return os.path.expanduser(override)
    return os.path.join(platformdirs.user_config_dir(APP_NAME), CONFIG_FILE_NAME)


def _read_config_file(config_path: str) -> Dict[str, Any]:
    if not os.path.exists(config_path):
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Failed to read settings file {config_path}", details=str(e), cause=e
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Settings file {config_path} must contain a mapping",
            details=f"got {type(data).__name__}",
        )
    logger.debug(f"Loaded settings from {config_path}")
    return data


def _coerce(name: str, value: Any, kind: type) -> Any:
    if value is None or value == "":
        return None
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid value for {name}", details=repr(value), cause=e
        ) from e


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Load settings from the YAML file and apply environment overrides.

    Parameters:
        config_path (Optional[str]): Explicit settings file; defaults to get_config_file().

    Returns:
        Settings: The resolved settings. Missing keys keep their defaults.

    Raises:
        ConfigurationError: If the file cannot be parsed or a value has the wrong type.
    """
    data = _read_config_file(config_path or get_config_file())

    timeout = os.environ.get(REQUEST_TIMEOUT_ENV_VAR, data.get("request_timeout"))
    retries = os.environ.get(CONNECT_RETRIES_ENV_VAR, data.get("connect_retries"))
    backoff = data.get("backoff_factor")

    request_timeout = _coerce("request_timeout", timeout, float)
    connect_retries = _coerce("connect_retries", retries, int)
    backoff_factor = _coerce("backoff_factor", backoff, float)

    if connect_retries is not None and connect_retries < 0:
        raise ConfigurationError(
            "Invalid value for connect_retries", details="must not be negative"
        )

    log_level = data.get("log_level")
    return Settings(
        request_timeout=request_timeout,
        connect_retries=(
            DEFAULT_CONNECT_RETRIES if connect_retries is None else connect_retries
        ),
        backoff_factor=(
            DEFAULT_BACKOFF_FACTOR if backoff_factor is None else backoff_factor
        ),
        log_level=str(log_level) if log_level else None,
    )
