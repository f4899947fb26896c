from .trend_history import TrendHistory, WindowStatistics, classify_trend, window_statistics

__all__ = ["TrendHistory", "WindowStatistics", "classify_trend", "window_statistics"]
