"""
SQS Monitor - Configuration Management

Handles loading and validating dashboard settings.
Settings are read from ~/.config/sqs-monitor/settings.json
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .filters import QueueFilter, build_filter

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "refresh_interval": 30,
    "poll_timeout_ms": 100,
    "filter": "non_empty",
    "filter_threshold": 1,
    "filter_pattern": "*",
    # Queue name prefix passed to ListQueues; empty lists every queue
    "queue_name_prefix": "",
    "aws_region": None,
    "aws_profile": None,
    "endpoint_url": None,
}


def default_config_path() -> Path:
    return Path.home() / ".config" / "sqs-monitor" / "settings.json"


class MonitorConfig:
    """Configuration manager for the SQS monitor dashboard."""

    def __init__(self, config_path: Optional[Path] = None):
        self._config_path = config_path or default_config_path()
        self._settings: Dict[str, Any] = dict(DEFAULT_CONFIG)
        self.load()

    @property
    def path(self) -> Path:
        return self._config_path

    def load(self) -> None:
        """Load settings from disk, falling back to defaults."""
        if self._config_path.exists():
            try:
                with open(self._config_path, "r") as f:
                    saved = json.load(f)
                if not isinstance(saved, dict):
                    raise ValueError("settings file must contain a JSON object")
                for key, value in saved.items():
                    if key in DEFAULT_CONFIG:
                        self._settings[key] = value
                logger.info("Loaded settings from %s", self._config_path)
            except (ValueError, OSError) as e:
                logger.warning("Failed to load settings: %s, using defaults", e)
        else:
            logger.info("No settings file found, using defaults")

    def get(self, key: str, default: Any = None) -> Any:
        return self._settings.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if key in DEFAULT_CONFIG:
            self._settings[key] = value

    def update(self, settings: Dict[str, Any]) -> None:
        """Apply overrides, skipping unknown keys and None values."""
        for key, value in settings.items():
            if value is not None:
                self.set(key, value)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._settings)

    # -- Typed accessors --

    @property
    def refresh_interval(self) -> float:
        return self._positive_number("refresh_interval")

    @property
    def poll_timeout_ms(self) -> int:
        try:
            timeout = int(self._positive_number("poll_timeout_ms"))
        except (OverflowError, ValueError):
            timeout = 0
        if timeout < 1:
            # getch would stop blocking and the loop would spin
            logger.warning("Invalid poll_timeout_ms=%r, using default %s",
                           self._settings.get("poll_timeout_ms"),
                           DEFAULT_CONFIG["poll_timeout_ms"])
            return int(DEFAULT_CONFIG["poll_timeout_ms"])
        return timeout

    @property
    def filter_threshold(self) -> int:
        value = self._settings.get("filter_threshold")
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            logger.warning("Invalid filter_threshold=%r, using default %s",
                           value, DEFAULT_CONFIG["filter_threshold"])
            return int(DEFAULT_CONFIG["filter_threshold"])

    def _positive_number(self, key: str) -> float:
        value = self._settings.get(key)
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = 0.0
        if number <= 0:
            logger.warning("Invalid %s=%r, using default %s",
                           key, value, DEFAULT_CONFIG[key])
            return float(DEFAULT_CONFIG[key])
        return number

    def queue_filter(self) -> QueueFilter:
        """Build the configured filter predicate.

        Raises ValueError if the filter name is unknown.
        """
        return build_filter(
            str(self._settings.get("filter")),
            threshold=self.filter_threshold,
            pattern=str(self._settings.get("filter_pattern") or "*"),
        )
