"""
Server Configuration
=====================
Defaults for the demo server, overridable from the environment
(``TASKAPI_*``) and then from CLI flags.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields


DEFAULT_ADMIN_API_KEY = "your_secret_admin_key_123"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ENV_VARS = {
    "host": "TASKAPI_HOST",
    "port": "TASKAPI_PORT",
    "admin_api_key": "TASKAPI_ADMIN_KEY",
    "log_level": "TASKAPI_LOG_LEVEL",
    "slow_min_ms": "TASKAPI_SLOW_MIN_MS",
    "slow_max_ms": "TASKAPI_SLOW_MAX_MS",
}


@dataclass
class ServerConfig:
    """Everything the server needs at startup."""

    host: str = "0.0.0.0"
    port: int = 3000
    admin_api_key: str = DEFAULT_ADMIN_API_KEY
    log_level: str = "INFO"
    slow_min_ms: float = 1500.0
    slow_max_ms: float = 3500.0
    slow_failure_threshold_ms: float = 3000.0
    slow_failure_rate: float = 0.2

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level} "
                             f"(expected one of {', '.join(LOG_LEVELS)})")
        if self.slow_min_ms > self.slow_max_ms:
            raise ValueError(f"Slow delay minimum ({self.slow_min_ms}ms) must not exceed "
                             f"the maximum ({self.slow_max_ms}ms)")

    @classmethod
    def from_env(cls, environ: dict = None) -> ServerConfig:
        """Build a config from ``TASKAPI_*`` variables (``os.environ`` by default).

        Raises ValueError when a numeric variable cannot be parsed, the log
        level is unknown, or the slow delay bounds are inverted.
        """
        environ = os.environ if environ is None else environ
        casts = {"port": int, "slow_min_ms": float, "slow_max_ms": float}
        values = {}
        for name, var in ENV_VARS.items():
            raw = environ.get(var)
            if raw is None or raw == "":
                continue
            cast = casts.get(name, str)
            try:
                values[name] = cast(raw)
            except ValueError:
                raise ValueError(f"{var} must be a number, got {raw!r}")
        return cls(**values)

    def override(self, **kwargs) -> ServerConfig:
        """Return a copy with every non-None keyword applied."""
        known = {f.name for f in fields(self)}
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        for key, value in kwargs.items():
            if key not in known:
                raise TypeError(f"Unknown config field: {key}")
            if value is not None:
                data[key] = value
        return ServerConfig(**data)
