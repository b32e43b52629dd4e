"""
Runtime configuration for the event registry.

Settings come from keyword arguments or from ``EVENTHUB_*`` environment
variables:

    EVENTHUB_CHECK_TYPES   check payload values against handler annotations (default: 1)
    EVENTHUB_LOG_LEVEL     DEBUG, INFO, WARNING, ERROR or CRITICAL (default: INFO)
    EVENTHUB_JSON_LOGS     render log lines as JSON (default: 0)
    EVENTHUB_LOG_FILE      append log lines to this file instead of stderr
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "EVENTHUB_"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{ENV_PREFIX}{name} must be a boolean flag, got {raw!r}")


@dataclass(frozen=True)
class RegistryConfig:
    """
    Configuration for an EventRegistry.

    Args:
        check_types: Reject payload values that do not match handler annotations
        log_level: Level used by configure_logging
        json_logs: Render logs as JSON instead of console output
        log_file: Optional file to append logs to
    """

    check_types: bool = True
    log_level: str = "INFO"
    json_logs: bool = False
    log_file: Path | None = None

    def __post_init__(self):
        level = self.log_level.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        object.__setattr__(self, "log_level", level)

    @classmethod
    def from_env(cls) -> RegistryConfig:
        """Build a config from EVENTHUB_* environment variables."""
        log_file = os.getenv(ENV_PREFIX + "LOG_FILE", "").strip()
        return cls(
            check_types=_env_flag("CHECK_TYPES", True),
            log_level=os.getenv(ENV_PREFIX + "LOG_LEVEL", "INFO").strip() or "INFO",
            json_logs=_env_flag("JSON_LOGS", False),
            log_file=Path(log_file) if log_file else None,
        )
