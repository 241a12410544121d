"""schedulebuilder.config_loader

Configuration for the schedulebuilder CLI and embedding applications.

- Reads a YAML mapping (PyYAML ``safe_load``; JSON is valid YAML too).
- Environment variables override file values.
- Exposes a typed dataclass ``Config`` and ``load_config()`` /
  ``load_full_config()`` helpers that accept an optional path override.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .occurrences import DEFAULT_MIN_EVENT_HEIGHT_PERCENT

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("schedulebuilder.yaml")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Typed configuration for schedulebuilder.

    Fields:
        events_file: default events file (YAML/JSON list of records) for the CLI
        min_event_height_percent: smallest rendered event height in an hour cell (1..100)
        log_level: logging level name
    """

    events_file: str | None = None
    min_event_height_percent: float = DEFAULT_MIN_EVENT_HEIGHT_PERCENT
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Numeric values are coerced to float and clamped to 1..100; unknown log
        levels fall back to INFO. Every coercion is logged as a warning.
        """
        if data is None:
            data = {}

        events_file = data.get("events_file")
        events_file = str(events_file) if events_file not in (None, "") else None

        raw_height = data.get("min_event_height_percent", DEFAULT_MIN_EVENT_HEIGHT_PERCENT)
        try:
            min_height = float(raw_height)
        except (TypeError, ValueError):
            logger.warning(
                "Config min_event_height_percent=%r is not a number; using default %s",
                raw_height,
                DEFAULT_MIN_EVENT_HEIGHT_PERCENT,
            )
            min_height = DEFAULT_MIN_EVENT_HEIGHT_PERCENT
        if min_height < 1.0:
            logger.warning("min_event_height_percent %s below minimum; coercing to 1", min_height)
            min_height = 1.0
        elif min_height > 100.0:
            logger.warning("min_event_height_percent %s above maximum; coercing to 100", min_height)
            min_height = 100.0

        log_level = str(data.get("log_level") or "INFO").upper()
        if log_level not in LOG_LEVELS:
            logger.warning("Config log_level=%r is not a known level; using INFO", log_level)
            log_level = "INFO"

        return cls(
            events_file=events_file,
            min_event_height_percent=min_height,
            log_level=log_level,
        )


def _load_yaml(path: Path) -> Any:
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    # safe_load returns None for empty files
    return {} if loaded is None else loaded


def build_config_from_env() -> dict[str, Any]:
    """Build a configuration mapping from environment variables.

    Recognizes:
    - SCHEDULEBUILDER_EVENTS_FILE -> 'events_file'
    - SCHEDULEBUILDER_MIN_EVENT_HEIGHT -> 'min_event_height_percent'
    - SCHEDULEBUILDER_LOG_LEVEL -> 'log_level'
    """
    cfg: dict[str, Any] = {}

    events_file = os.environ.get("SCHEDULEBUILDER_EVENTS_FILE")
    if events_file:
        cfg["events_file"] = events_file

    min_height = os.environ.get("SCHEDULEBUILDER_MIN_EVENT_HEIGHT")
    if min_height:
        try:
            cfg["min_event_height_percent"] = float(min_height)
        except ValueError:
            logger.warning("Invalid SCHEDULEBUILDER_MIN_EVENT_HEIGHT=%r; ignoring", min_height)

    log_level = os.environ.get("SCHEDULEBUILDER_LOG_LEVEL")
    if log_level:
        cfg["log_level"] = log_level

    return cfg


def read_config_mapping(path: str | None = None) -> dict[str, Any]:
    """Read the raw configuration mapping from a YAML file.

    Returns an empty mapping when the file does not exist.

    Raises:
        ValueError: If the file's top level is not a mapping
        yaml.YAMLError: If the file is not valid YAML
    """
    p = Path(path) if path else Path.cwd() / DEFAULT_CONFIG_PATH
    logger.debug("Attempting to load config from %s", p)
    if not p.exists():
        logger.info("Config file %s not found; using defaults", p)
        return {}

    raw = _load_yaml(p)
    if not isinstance(raw, dict):
        logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
        raise ValueError("Config file must contain a mapping at top level")  # noqa: TRY004
    logger.info("Loaded configuration from %s", p)
    return raw


def load_config(path: str | None = None) -> Config:
    """Load configuration from a YAML file and return a Config instance.

    Args:
        path: Optional path to the config file. If not provided the default is
              ./schedulebuilder.yaml (relative to current working dir).

    Returns:
        Config dataclass instance with values from file (or defaults).
    """
    cfg = Config.from_dict(read_config_mapping(path))
    logger.debug("Configuration values: %s", cfg)
    return cfg


def load_full_config(path: str | None = None) -> Config:
    """Load the config file and apply environment variable overrides on top."""
    data = read_config_mapping(path)
    data.update(build_config_from_env())
    cfg = Config.from_dict(data)
    logger.debug("Configuration values (with environment overrides): %s", cfg)
    return cfg
