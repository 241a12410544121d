"""
Central logging configuration for schedulebuilder.

The engine modules only create module-level loggers; nothing in the library
configures handlers on import. Applications and the CLI call
``configure_lite_logging()`` once at startup.
"""

import logging
import os
import sys
from typing import Optional

from colorlog import ColoredFormatter

LOG_FORMAT = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}

ENGINE_MODULES = [
    "schedulebuilder",
    "schedulebuilder.recurrence",
    "schedulebuilder.conflicts",
    "schedulebuilder.occurrences",
    "schedulebuilder.records",
    "schedulebuilder.models",
    "schedulebuilder.config_loader",
]


def _env_debug() -> bool:
    return os.getenv("SCHEDULEBUILDER_DEBUG", "").strip().lower() in ("1", "true", "yes", "on")


def configure_lite_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure console logging for schedulebuilder.

    Installs a colorized stderr handler on the root logger when it has none,
    and sets the level of the root logger and the schedulebuilder module
    loggers.

    Args:
        debug_mode: Whether to enable debug logging for schedulebuilder modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        SCHEDULEBUILDER_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        SCHEDULEBUILDER_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_log_level = os.getenv("SCHEDULEBUILDER_LOG_LEVEL", "").strip().upper()

    if force_debug is not None:
        final_debug = force_debug
    elif _env_debug():
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    # Only add a handler if none exist so embedding applications keep theirs.
    if not root_logger.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(
            ColoredFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT, log_colors=LOG_COLORS)
        )
        root_logger.addHandler(handler)

    module_level = logging.DEBUG if final_debug else root_level
    for module in ENGINE_MODULES:
        logging.getLogger(module).setLevel(module_level)

    if final_debug:
        root_logger.debug("Debug logging enabled for schedulebuilder modules")


def reset_logging_to_debug() -> None:
    """
    Reset the root and all schedulebuilder loggers to DEBUG for troubleshooting.
    """
    logging.getLogger().setLevel(logging.DEBUG)
    for module in ENGINE_MODULES:
        logging.getLogger(module).setLevel(logging.DEBUG)

    logging.getLogger().info("All schedulebuilder loggers reset to DEBUG level")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for module in ENGINE_MODULES:
        status[module] = logging.getLevelName(logging.getLogger(module).level)
    return status
