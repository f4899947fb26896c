from .metrics_calculator import (
    CachedParameter,
    DerivedMetrics,
    RawCounters,
    compute,
    parse_ideal_cycle_seconds,
    parse_planned_seconds,
)
from .production_analysis import ProductionAnalysis, analyze_production, data_quality_score
from .system_status import SystemStatus, SystemStatusTracker

__all__ = [
    "CachedParameter",
    "DerivedMetrics",
    "ProductionAnalysis",
    "RawCounters",
    "SystemStatus",
    "SystemStatusTracker",
    "analyze_production",
    "compute",
    "data_quality_score",
    "parse_ideal_cycle_seconds",
    "parse_planned_seconds",
]
