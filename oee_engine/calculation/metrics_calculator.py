"""Cálculo puro de métricas OEE.

OEE = Quality x Performance x Availability / 10000, todo en porcentaje.

Política de bordes:
- Total nunca negativo; quality siempre en [0, 100]
- Sin piezas: quality = performance = oee = 0, independientemente del runtime
- Piezas sin runtime medido: performance = 100 (optimista)
- Ciclo ideal <= 0: performance = 0
- Tiempo planificado inválido (<= 0 o NaN): availability = 100, downtime = 0
- Performance no se limita a 100, solo a PERFORMANCE_CEILING
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Callable, Generic, TypeVar

from oee_engine.utils.coercion import coerce_double

PERFORMANCE_CEILING = 999.9
DEFAULT_EXPECTED_PARTS = 480.0

T = TypeVar("T")


@dataclass(frozen=True)
class RawCounters:
    runtime_seconds: float
    good_count: int
    bad_count: int


@dataclass(frozen=True)
class DerivedMetrics:
    total_count: int
    quality: float
    performance: float
    availability: float
    oee: float
    parts_per_hour: float
    avg_cycle_time: float
    expected_part_count: float
    downtime_seconds: float

    def for_metric(self, metric: str) -> float:
        return {
            "Quality": self.quality,
            "Performance": self.performance,
            "Availability": self.availability,
            "OEE": self.oee,
        }[metric]

    def to_dict(self) -> dict:
        return asdict(self)


def _planned_is_valid(planned_seconds: float) -> bool:
    return not math.isnan(planned_seconds) and planned_seconds > 0


def compute(
    counters: RawCounters,
    ideal_cycle_seconds: float,
    planned_seconds: float,
    *,
    clamp_defects: bool = False,
    expected_parts_fallback: float = DEFAULT_EXPECTED_PARTS,
) -> DerivedMetrics:
    good = counters.good_count
    bad = counters.bad_count
    runtime = counters.runtime_seconds

    if clamp_defects:
        # contadores negativos (reset de PLC) -> 0, así bad <= total siempre
        good = max(good, 0)
        bad = max(bad, 0)

    total = max(0, good + bad)

    if total == 0:
        quality = 0.0
    else:
        quality = max(0.0, min(100.0, good / total * 100.0))

    if total == 0:
        performance = 0.0
    elif runtime <= 0:
        performance = 100.0
    elif ideal_cycle_seconds <= 0:
        performance = 0.0
    else:
        performance = min(PERFORMANCE_CEILING, ideal_cycle_seconds * total / runtime * 100.0)

    planned_valid = _planned_is_valid(planned_seconds)
    if planned_valid:
        availability = max(0.0, min(100.0, runtime / planned_seconds * 100.0))
    else:
        availability = 100.0

    oee = quality * performance * availability / 10000.0

    parts_per_hour = total / runtime * 3600.0 if runtime > 0 else 0.0
    avg_cycle_time = runtime / total if total > 0 else ideal_cycle_seconds

    if planned_valid and ideal_cycle_seconds > 0:
        expected = planned_seconds / ideal_cycle_seconds
    else:
        expected = expected_parts_fallback

    downtime = max(0.0, planned_seconds - runtime) if planned_valid else 0.0

    return DerivedMetrics(
        total_count=total,
        quality=quality,
        performance=performance,
        availability=availability,
        oee=oee,
        parts_per_hour=parts_per_hour,
        avg_cycle_time=avg_cycle_time,
        expected_part_count=expected,
        downtime_seconds=downtime,
    )


# ---------------------------------------------------------------------------
# Cache de parámetros
# ---------------------------------------------------------------------------


class CachedParameter(Generic[T]):
    """Valor parseado cacheado contra el último valor crudo visto.

    Solo re-parsea cuando el valor crudo cambia (igualdad estructural).
    """

    _UNSET = object()

    def __init__(self, parse: Callable[[Any], T]) -> None:
        self._parse = parse
        self._raw: Any = self._UNSET
        self._value: Any = None
        self.parse_count = 0

    def get(self, raw: Any) -> T:
        if self._raw is self._UNSET or type(raw) is not type(self._raw) or raw != self._raw:
            self._value = self._parse(raw)
            self._raw = raw
            self.parse_count += 1
        return self._value

    def clear(self) -> None:
        self._raw = self._UNSET
        self._value = None


def parse_ideal_cycle_seconds(raw: Any) -> float:
    # <= 0 pasa tal cual: compute() lo traduce a performance 0
    return coerce_double(raw, 0.0).value


def parse_planned_seconds(raw: Any) -> float:
    hours = coerce_double(raw, math.nan).value
    if math.isnan(hours) or hours <= 0:
        return math.nan
    return hours * 3600.0
