"""Shared test fixtures.

Keeps tests deterministic (fixed clock, sequential ids) and away from the
real platform directories.
"""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from pinepomo.timer.machine import TimerStateMachine

T0 = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)  # a Monday


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture()
def machine(clock, id_factory) -> TimerStateMachine:
    return TimerStateMachine(
        device_id_provider=lambda: "device-1", clock=clock, id_factory=id_factory
    )


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Also clears the lru_cache so each test gets a fresh service instance.
    """
    from pinepomo.services.config_service import ConfigService, get_config_service

    get_config_service.cache_clear()
    svc = ConfigService(config_dir=tmp_path / "config", data_dir=tmp_path / "data")
    yield svc
    get_config_service.cache_clear()
