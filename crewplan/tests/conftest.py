"""Shared pytest fixtures."""

from datetime import date

import pytest
import structlog

from crewplan.infrastructure.cache import InMemoryScanCache
from crewplan.infrastructure.memory import (
    InMemoryAlertSink,
    InMemoryStore,
    InMemoryUnitOfWork,
)
from crewplan.services import CrewSchedulingService

from .domain.scheduling.fixtures import MONDAY


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def today() -> date:
    return MONDAY


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def unit_of_work(store) -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(store)


@pytest.fixture
def scan_cache(clock) -> InMemoryScanCache:
    return InMemoryScanCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def alert_sink() -> InMemoryAlertSink:
    return InMemoryAlertSink()


@pytest.fixture
def service(store, scan_cache, alert_sink, today) -> CrewSchedulingService:
    return CrewSchedulingService.in_memory(
        store=store,
        cache=scan_cache,
        alert_sink=alert_sink,
        today=lambda: today,
    )
