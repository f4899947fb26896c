from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime

from oee_engine.config.config_reader import SystemFlags
from oee_engine.utils.formatting import format_duration

from .metrics_calculator import DerivedMetrics

NOT_RUNNING = "Not Running"
INDEFINITE = "Indefinite"


@dataclass(frozen=True)
class ProductionAnalysis:
    target_vs_actual: int
    behind_schedule: bool
    production_progress: float
    required_rate_to_target: float
    projected_total_count: int
    remaining_time_at_current_rate: str
    calculation_valid: bool
    data_quality_score: float

    def to_dict(self) -> dict:
        return asdict(self)


def analyze_production(
    metrics: DerivedMetrics,
    runtime_seconds: float,
    production_target: int,
    shift_end: datetime,
    now: datetime,
    flags: SystemFlags,
) -> ProductionAnalysis:
    """Avance contra el target de producción del turno actual."""

    total = metrics.total_count
    behind = total < production_target

    if production_target > 0:
        progress = min(100.0, total / production_target * 100.0)
    else:
        progress = 0.0

    if runtime_seconds > 0:
        rate = total / (runtime_seconds / 3600.0)
        remaining_hours = max(0.0, (shift_end - now).total_seconds() / 3600.0)
        if remaining_hours > 0:
            required = max(0.0, (production_target - total) / remaining_hours)
        else:
            required = 0.0
        projected = int(total + rate * remaining_hours)
        if rate > 0:
            hours_to_target = max(0.0, (production_target - total) / rate)
            remaining_text = format_duration(hours_to_target * 3600.0)
        else:
            remaining_text = INDEFINITE
    else:
        required = 0.0
        projected = total
        remaining_text = NOT_RUNNING

    return ProductionAnalysis(
        target_vs_actual=total - production_target,
        behind_schedule=behind,
        production_progress=progress,
        required_rate_to_target=required,
        projected_total_count=projected,
        remaining_time_at_current_rate=remaining_text,
        calculation_valid=flags.enable_real_time_calc and runtime_seconds >= flags.minimum_run_time,
        data_quality_score=data_quality_score(
            total, runtime_seconds, behind, metrics.oee, flags.poor_oee_threshold
        ),
    )


def data_quality_score(
    total_count: int,
    runtime_seconds: float,
    behind_schedule: bool,
    oee: float,
    poor_oee_threshold: float,
) -> float:
    score = 100.0
    if total_count == 0:
        score -= 30
    if runtime_seconds <= 0:
        score -= 40
    if behind_schedule:
        score -= 15
    if oee < poor_oee_threshold:
        score -= 10
    return max(0.0, min(100.0, score))
