from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from statistics import mean
from typing import Deque, Dict, Iterable, Sequence

from oee_engine.calculation.metrics_calculator import DerivedMetrics
from oee_engine.store.paths import TRACKED_METRICS

INSUFFICIENT_DATA = "Insufficient Data"
RISING_STRONGLY = "Rising Strongly"
RISING = "Rising"
FALLING_STRONGLY = "Falling Strongly"
FALLING = "Falling"
STABLE = "Stable"

STRONG_DELTA = 2.0
MILD_DELTA = 0.5


@dataclass(frozen=True)
class WindowStatistics:
    """min / max / avg de la ventana actual; 0.0 si está vacía."""

    min: float
    max: float
    avg: float
    count: int


def _label(delta: float) -> str:
    if delta >= STRONG_DELTA:
        return RISING_STRONGLY
    if delta >= MILD_DELTA:
        return RISING
    if delta <= -STRONG_DELTA:
        return FALLING_STRONGLY
    if delta <= -MILD_DELTA:
        return FALLING
    return STABLE


def classify_trend(window: Sequence[float]) -> str:
    """Clasifica la tendencia de una ventana de muestras.

    - Menos de 2 muestras: "Insufficient Data"
    - Hasta 4 muestras: último - primero
    - Más: media de la segunda mitad - media de la primera mitad,
      con mitad = max(n // 2, 2)
    """

    values = list(window)
    n = len(values)
    if n < 2:
        return INSUFFICIENT_DATA
    if n <= 4:
        return _label(values[-1] - values[0])

    half = max(n // 2, 2)
    return _label(mean(values[-half:]) - mean(values[:half]))


def window_statistics(window: Iterable[float]) -> WindowStatistics:
    values = list(window)
    if not values:
        return WindowStatistics(min=0.0, max=0.0, avg=0.0, count=0)
    # min <= avg <= max
    return WindowStatistics(min=min(values), max=max(values), avg=mean(values), count=len(values))


class TrendHistory:
    """Ventanas FIFO acotadas por métrica (Quality, Performance, Availability, OEE).

    Por defecto se agrega una muestra por tick sin condiciones. Con
    ``noise_filter`` se descarta la muestra de una métrica cuando no difiere
    más de ``noise_threshold`` de la última encolada para esa métrica.
    """

    def __init__(
        self,
        capacity: int = 60,
        noise_filter: bool = False,
        noise_threshold: float = 0.1,
        metrics: Sequence[str] = TRACKED_METRICS,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self.noise_filter = noise_filter
        self.noise_threshold = noise_threshold
        self._windows: Dict[str, Deque[float]] = {m: deque(maxlen=capacity) for m in metrics}

    def append(self, metrics: DerivedMetrics) -> None:
        for name in self._windows:
            self.append_value(name, metrics.for_metric(name))

    def append_value(self, metric: str, value: float) -> bool:
        window = self._windows[metric]
        if self.noise_filter and window and abs(window[-1] - value) <= self.noise_threshold:
            return False
        window.append(float(value))
        return True

    def window(self, metric: str) -> tuple:
        return tuple(self._windows[metric])

    def trend(self, metric: str) -> str:
        return classify_trend(self._windows[metric])

    def statistics(self, metric: str) -> WindowStatistics:
        return window_statistics(self._windows[metric])

    def trends(self) -> Dict[str, str]:
        return {m: self.trend(m) for m in self._windows}

    def all_statistics(self) -> Dict[str, WindowStatistics]:
        return {m: self.statistics(m) for m in self._windows}

    def clear(self) -> None:
        for window in self._windows.values():
            window.clear()

    def __len__(self) -> int:
        return max((len(w) for w in self._windows.values()), default=0)
