from __future__ import annotations

import pytest

from requests_mock import Mocker

from wxcore.cache import CacheLayer, MemoryStore
from wxcore.health import HealthRegistry


class TimeController:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def requests_mock():
    with Mocker() as mock:
        yield mock


@pytest.fixture
def clock() -> TimeController:
    return TimeController()


@pytest.fixture
def health() -> HealthRegistry:
    return HealthRegistry()


@pytest.fixture
def store(clock) -> MemoryStore:
    return MemoryStore(time_func=clock)


@pytest.fixture
def cache(store, clock, health) -> CacheLayer:
    return CacheLayer(store, stale_ttl=600, time_func=clock, health=health)
