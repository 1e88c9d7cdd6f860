"""Service configuration for pyhealthmon."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from pyhealthmon._constants import (
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_HOST,
    HIGH_FREQUENCY_CAPACITY,
    HISTORY_CAPACITY,
    HTTP_PORT,
    LOG_DIR,
    UDP_PORT,
)
from pyhealthmon.exceptions import HealthConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_int(env_key: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise HealthConfigError(f"{env_key} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class MonitorConfig:
    """Service configuration.

    Parameters
    ----------
    udp_host : str
        Address the datagram listener binds to.
    udp_port : int
        Well-known port the device sends to.  ``0`` picks a free port.
    http_host : str
        Address the query interface binds to.
    http_port : int
        Port of the query interface and dashboard.  ``0`` picks a free port.
    http_enabled : bool
        Serve the query interface.  Disable to run ingestion only.
    log_dir : Path
        Directory holding the ``health_data_udp_<date>.json`` files.
    history_capacity : int
        Number of full readings kept in memory.
    hf_capacity : int
        Number of high-frequency ECG samples kept in memory.
    default_history_limit : int
        Entries returned by a history query without a usable ``limit``.
    log_queue_size : int
        When greater than zero, log appends are handed to a background
        writer thread through a queue of this size instead of being
        written on the ingestion path.
    """

    udp_host: str = DEFAULT_HOST
    udp_port: int = UDP_PORT
    http_host: str = DEFAULT_HOST
    http_port: int = HTTP_PORT
    http_enabled: bool = True
    log_dir: Path = Path(LOG_DIR)
    history_capacity: int = HISTORY_CAPACITY
    hf_capacity: int = HIGH_FREQUENCY_CAPACITY
    default_history_limit: int = DEFAULT_HISTORY_LIMIT
    log_queue_size: int = 0

    def __post_init__(self) -> None:
        for name in ("udp_port", "http_port"):
            port = getattr(self, name)
            if not 0 <= port <= 65535:
                raise HealthConfigError(f"{name} must be between 0 and 65535, got {port}")
        for name in ("history_capacity", "hf_capacity", "default_history_limit"):
            if getattr(self, name) <= 0:
                raise HealthConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if self.log_queue_size < 0:
            raise HealthConfigError(f"log_queue_size must not be negative, got {self.log_queue_size}")
        if not isinstance(self.log_dir, Path):
            object.__setattr__(self, "log_dir", Path(self.log_dir))

    @classmethod
    def from_env(cls, **overrides: Any) -> MonitorConfig:
        """Create configuration from environment variables.

        Reads optional ``PYHEALTHMON_*`` variables.  Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        MonitorConfig
            Populated configuration.

        Raises
        ------
        HealthConfigError
            If a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        _ENV_STR_MAP = {
            "PYHEALTHMON_UDP_HOST": "udp_host",
            "PYHEALTHMON_HTTP_HOST": "http_host",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_INT_MAP = {
            "PYHEALTHMON_UDP_PORT": "udp_port",
            "PYHEALTHMON_HTTP_PORT": "http_port",
            "PYHEALTHMON_HISTORY_CAPACITY": "history_capacity",
            "PYHEALTHMON_HF_CAPACITY": "hf_capacity",
            "PYHEALTHMON_LOG_QUEUE_SIZE": "log_queue_size",
        }
        for env_key, field_name in _ENV_INT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_int(env_key, val)

        log_dir_env = env.get("PYHEALTHMON_LOG_DIR")
        if log_dir_env is not None and "log_dir" not in overrides:
            config_kwargs["log_dir"] = Path(log_dir_env)

        if "http_enabled" not in overrides:
            config_kwargs["http_enabled"] = _env_bool(env.get("PYHEALTHMON_HTTP_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
