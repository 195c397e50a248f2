"""Shared fixtures for the vyb test suite."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from vyb.config import ContextSettings
from vyb.contextmanager import SmartContextManager

START = datetime(2025, 1, 6, 9, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced clock for time-gated behaviour."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def manager(clock: FakeClock) -> SmartContextManager:
    """A manager with default capacities and a fake clock."""
    return SmartContextManager(clock=clock)


@pytest.fixture
def small_manager(clock: FakeClock) -> SmartContextManager:
    """A manager with tiny capacities so overflow is cheap to trigger."""
    settings = ContextSettings(max_immediate_items=3, max_short_term_items=5)
    return SmartContextManager(settings, clock=clock)
