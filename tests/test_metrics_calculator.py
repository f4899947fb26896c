"""Tests del cálculo OEE y sus casos borde."""

import math

import pytest

from oee_engine.calculation.metrics_calculator import (
    PERFORMANCE_CEILING,
    CachedParameter,
    RawCounters,
    compute,
    parse_ideal_cycle_seconds,
    parse_planned_seconds,
)


# =============================================================================
# ESCENARIOS END-TO-END
# =============================================================================

class TestScenarios:
    def test_scenario_a(self):
        m = compute(RawCounters(3600.0, 80, 20), 30.0, 28800.0)

        assert m.total_count == 100
        assert m.quality == pytest.approx(80.0)
        assert m.performance == pytest.approx(83.3333, rel=1e-4)
        assert m.availability == pytest.approx(12.5)
        assert m.oee == pytest.approx(8.3333, rel=1e-4)
        assert m.parts_per_hour == pytest.approx(100.0)
        assert m.avg_cycle_time == pytest.approx(36.0)
        assert m.expected_part_count == pytest.approx(960.0)
        assert m.downtime_seconds == pytest.approx(25200.0)

    @pytest.mark.parametrize("runtime", [0.0, 10.0, 3600.0, -5.0])
    def test_scenario_b_no_production(self, runtime):
        m = compute(RawCounters(runtime, 0, 0), 30.0, 28800.0)

        assert m.total_count == 0
        assert m.quality == 0.0
        assert m.performance == 0.0
        assert m.oee == 0.0
        assert m.avg_cycle_time == 30.0


# =============================================================================
# CASOS BORDE
# =============================================================================

class TestEdgeCases:
    def test_parts_without_runtime_are_optimistic(self):
        m = compute(RawCounters(0.0, 10, 0), 30.0, 28800.0)
        assert m.performance == 100.0
        assert m.parts_per_hour == 0.0
        assert m.availability == 0.0

    @pytest.mark.parametrize("ideal", [0.0, -5.0])
    def test_non_positive_ideal_cycle_gives_zero_performance(self, ideal):
        m = compute(RawCounters(3600.0, 50, 5), ideal, 28800.0)
        assert m.performance == 0.0
        assert m.oee == 0.0
        assert m.expected_part_count == 480.0

    def test_performance_ceiling(self):
        m = compute(RawCounters(1.0, 100, 0), 100.0, 28800.0)
        assert m.performance == PERFORMANCE_CEILING

    def test_performance_is_not_capped_at_100(self):
        m = compute(RawCounters(1000.0, 100, 0), 20.0, 28800.0)
        assert m.performance == pytest.approx(200.0)

    @pytest.mark.parametrize("planned", [math.nan, 0.0, -100.0])
    def test_invalid_planned_time(self, planned):
        m = compute(RawCounters(3600.0, 80, 20), 30.0, planned)
        assert m.availability == 100.0
        assert m.downtime_seconds == 0.0
        assert m.expected_part_count == 480.0

    def test_expected_parts_fallback_is_configurable(self):
        m = compute(RawCounters(3600.0, 80, 20), 0.0, 28800.0, expected_parts_fallback=1200.0)
        assert m.expected_part_count == 1200.0

    def test_availability_clamped_when_runtime_exceeds_plan(self):
        m = compute(RawCounters(40000.0, 10, 0), 30.0, 28800.0)
        assert m.availability == 100.0
        assert m.downtime_seconds == 0.0

    def test_negative_counters_clamped_when_enabled(self):
        raw = RawCounters(3600.0, 10, -3)

        unclamped = compute(raw, 30.0, 28800.0)
        clamped = compute(raw, 30.0, 28800.0, clamp_defects=True)

        assert unclamped.total_count == 7
        assert unclamped.quality == 100.0
        assert clamped.total_count == 10
        assert clamped.quality == 100.0

    @pytest.mark.parametrize(
        "good,bad",
        [(10, -5), (-5, 10), (-10, -10), (3, -8)],
    )
    def test_negative_counters_stay_in_range(self, good, bad):
        m = compute(RawCounters(3600.0, good, bad), 30.0, 28800.0)

        assert m.total_count >= 0
        assert 0.0 <= m.quality <= 100.0
        assert 0.0 <= m.performance <= PERFORMANCE_CEILING
        assert 0.0 <= m.availability <= 100.0
        assert m.parts_per_hour >= 0.0
        assert m.oee >= 0.0


# =============================================================================
# PROPIEDADES
# =============================================================================

class TestProperties:
    def test_quality_range_and_zero_iff_no_parts(self):
        for good in range(0, 30, 3):
            for bad in range(0, 30, 4):
                m = compute(RawCounters(600.0, good, bad), 5.0, 3600.0)
                assert 0.0 <= m.quality <= 100.0
                assert (m.quality == 0.0) == (good == 0)
                if good + bad == 0:
                    assert m.quality == 0.0

    @pytest.mark.parametrize("runtime", [0.0, 1.0, 1800.0, 28800.0, 1e6])
    def test_availability_range(self, runtime):
        m = compute(RawCounters(runtime, 5, 1), 30.0, 28800.0)
        assert 0.0 <= m.availability <= 100.0

    @pytest.mark.parametrize(
        "counters,ideal,planned",
        [
            (RawCounters(3600.0, 80, 20), 30.0, 28800.0),
            (RawCounters(1234.5, 17, 3), 12.3, 7200.0),
            (RawCounters(50.0, 999, 1), 1.0, math.nan),
        ],
    )
    def test_oee_round_trip(self, counters, ideal, planned):
        m = compute(counters, ideal, planned)
        assert m.oee == m.quality * m.performance * m.availability / 10000


# =============================================================================
# CACHE DE PARÁMETROS
# =============================================================================

class TestCachedParameter:
    def test_reparses_only_on_raw_change(self):
        cache = CachedParameter(parse_ideal_cycle_seconds)

        assert cache.get(30) == 30.0
        assert cache.get(30) == 30.0
        assert cache.parse_count == 1

        assert cache.get("30") == 30.0
        assert cache.parse_count == 2

        assert cache.get(45.0) == 45.0
        assert cache.parse_count == 3

    def test_clear_forces_reparse(self):
        cache = CachedParameter(parse_planned_seconds)
        cache.get(8)
        cache.clear()
        cache.get(8)
        assert cache.parse_count == 2

    def test_ideal_cycle_parsing(self):
        assert parse_ideal_cycle_seconds("abc") == 0.0
        assert parse_ideal_cycle_seconds(None) == 0.0
        assert parse_ideal_cycle_seconds(-2) == -2.0

    def test_planned_seconds_parsing(self):
        assert parse_planned_seconds(8) == 28800.0
        assert parse_planned_seconds("1.5") == 5400.0
        assert math.isnan(parse_planned_seconds(0))
        assert math.isnan(parse_planned_seconds(None))
        assert math.isnan(parse_planned_seconds("abc"))
