from typing import Any, Dict

import pytest

from oee_engine.config.engine_config import EngineConfig
from oee_engine.store import paths
from oee_engine.store.in_memory_store import InMemoryMetricsStore


SCENARIO_A: Dict[str, Any] = {
    paths.GOOD_PART_COUNT: 80,
    paths.BAD_PART_COUNT: 20,
    paths.RUNTIME_SECONDS: 3600.0,
    paths.IDEAL_CYCLE_TIME_SECONDS: 30.0,
    paths.PLANNED_PRODUCTION_TIME_HOURS: 8.0,
    paths.NUMBER_OF_SHIFTS: 3,
    paths.SHIFT_START_TIME: "06:00:00",
    paths.PRODUCTION_TARGET: 1000,
    paths.UPDATE_RATE_MS: 20,
}


class FakeClock:
    """Reloj monotónico controlable desde el test."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def store() -> InMemoryMetricsStore:
    return InMemoryMetricsStore()


@pytest.fixture
def root(store):
    """Metrics root con layout completo y los contadores del escenario A."""
    return store.add_metrics_root("Plant/Line1/Press", SCENARIO_A, identifier="press-1")


@pytest.fixture
def scenario_a() -> Dict[str, Any]:
    return dict(SCENARIO_A)


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig(tick_interval_ms=20, config_refresh_seconds=2.0)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
