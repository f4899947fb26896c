import pytest

from oee_engine.calculation.metrics_calculator import RawCounters, compute
from oee_engine.trends.trend_history import (
    FALLING,
    FALLING_STRONGLY,
    INSUFFICIENT_DATA,
    RISING,
    RISING_STRONGLY,
    STABLE,
    TrendHistory,
    classify_trend,
    window_statistics,
)


class TestClassifyTrend:
    @pytest.mark.parametrize(
        "window,expected",
        [
            ([10.0, 10.5], RISING),
            ([10.0, 10.49], STABLE),
            ([10.0, 12.1], RISING_STRONGLY),
            ([10.0, 9.5], FALLING),
            ([12.1, 10.0], FALLING_STRONGLY),
            ([10.0, 11.0, 9.0, 10.2], STABLE),
        ],
    )
    def test_short_windows_compare_endpoints(self, window, expected):
        assert classify_trend(window) == expected

    @pytest.mark.parametrize("window", [[], [42.0]])
    def test_insufficient_data(self, window):
        assert classify_trend(window) == INSUFFICIENT_DATA

    def test_long_window_compares_half_averages(self):
        assert classify_trend([10.0] * 5 + [13.0] * 5) == RISING_STRONGLY
        assert classify_trend([10.0, 10.0, 10.0, 11.0, 11.0]) == RISING
        assert classify_trend([50.0, 40.0, 45.0, 45.0, 45.0, 45.0]) == STABLE

    def test_long_window_ignores_endpoint_spikes(self):
        # último - primero = +2.5, medias de las mitades: 11.0 vs 11.17
        window = [10.0, 12.0, 11.0, 11.0, 12.0, 9.0, 12.5]
        assert classify_trend(window) == STABLE


class TestWindowStatistics:
    def test_empty_window(self):
        stats = window_statistics([])
        assert (stats.min, stats.max, stats.avg, stats.count) == (0.0, 0.0, 0.0, 0)

    def test_values(self):
        stats = window_statistics([1.0, 2.0, 3.0])
        assert stats.min == 1.0
        assert stats.max == 3.0
        assert stats.avg == 2.0
        assert stats.count == 3

    @pytest.mark.parametrize(
        "window",
        [[0.1] * 7, [83.33333333333334] * 60, [1e-9, 1e9, 5.5], [99.9, 99.9, 99.90000000000001]],
    )
    def test_min_avg_max_ordering(self, window):
        stats = window_statistics(window)
        assert stats.min <= stats.avg <= stats.max


def _metrics(quality_good: int, bad: int = 0):
    return compute(RawCounters(3600.0, quality_good, bad), 30.0, 28800.0)


class TestTrendHistory:
    def test_capacity_is_bounded(self):
        history = TrendHistory(capacity=60)
        for i in range(70):
            history.append_value("OEE", float(i))

        window = history.window("OEE")
        assert len(window) == 60
        assert window[0] == 10.0
        assert window[-1] == 69.0

    def test_unconditional_append_by_default(self):
        history = TrendHistory()
        for value in (10.0, 10.05, 10.05):
            assert history.append_value("Quality", value) is True
        assert history.window("Quality") == (10.0, 10.05, 10.05)

    def test_noise_filter_skips_small_changes(self):
        history = TrendHistory(noise_filter=True, noise_threshold=0.1)

        assert history.append_value("Quality", 10.0) is True
        assert history.append_value("Quality", 10.05) is False
        assert history.append_value("Quality", 10.2) is True
        assert history.window("Quality") == (10.0, 10.2)

    def test_noise_filter_is_per_metric(self):
        history = TrendHistory(noise_filter=True)
        history.append(_metrics(80, 20))
        history.append(_metrics(80, 20))
        history.append(_metrics(90, 10))

        assert len(history.window("Quality")) == 2
        assert len(history.window("Availability")) == 1

    def test_append_tracks_all_metrics(self):
        history = TrendHistory()
        history.append(_metrics(80, 20))
        history.append(_metrics(90, 10))

        assert history.window("Quality") == (80.0, 90.0)
        assert history.trend("Quality") == RISING_STRONGLY
        assert history.trend("Availability") == STABLE
        assert set(history.trends()) == {"Quality", "Performance", "Availability", "OEE"}
        assert history.statistics("Quality").avg == 85.0
        assert len(history) == 2

    def test_clear(self):
        history = TrendHistory()
        history.append(_metrics(80, 20))
        history.clear()

        assert len(history) == 0
        assert history.trend("OEE") == INSUFFICIENT_DATA
        assert history.statistics("OEE").count == 0

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            TrendHistory(capacity=0)
