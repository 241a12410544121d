"""Shared fixtures for schedulebuilder tests."""

import logging
from collections.abc import Generator
from datetime import date, time
from typing import Any

import pytest

from schedulebuilder.lite_logging import ENGINE_MODULES
from schedulebuilder.models import Event, EventBuilder

SCHEDULEBUILDER_ENV_VARS = (
    "SCHEDULEBUILDER_DEBUG",
    "SCHEDULEBUILDER_LOG_LEVEL",
    "SCHEDULEBUILDER_EVENTS_FILE",
    "SCHEDULEBUILDER_MIN_EVENT_HEIGHT",
)


def pytest_configure(config: Any) -> None:
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "critical_path: Core functionality tests")
    config.addinivalue_line("markers", "smoke: Basic smoke tests")


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment variables from leaking into config and logging tests."""
    for name in SCHEDULEBUILDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, Any, None]:
    """Restore logger levels and root handlers changed by configure_lite_logging."""
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    module_levels = {name: logging.getLogger(name).level for name in ENGINE_MODULES}
    yield
    root.setLevel(level)
    root.handlers[:] = handlers
    for name, module_level in module_levels.items():
        logging.getLogger(name).setLevel(module_level)


@pytest.fixture
def weekly_algebra() -> Event:
    """Unlimited weekly class every Monday 09:00-10:00 starting 2024-01-01."""
    return (
        EventBuilder("Algebra")
        .with_id("algebra")
        .on(date(2024, 1, 1))
        .between(time(9, 0), time(10, 0))
        .weekly()
        .build()
    )


@pytest.fixture
def one_off_meeting() -> Event:
    """Single meeting on Monday 2024-01-15, 09:30-10:30."""
    return (
        EventBuilder("Advisor meeting")
        .with_id("meeting")
        .on(date(2024, 1, 15))
        .between(time(9, 30), time(10, 30))
        .build()
    )
