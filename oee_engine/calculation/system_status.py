"""Máquina de estados de SystemStatus.

Tabla de transición (evaluada en orden, una vez por tick):

    total == 0 y runtime <= 0                       -> Idle
    primera observación                             -> Stopped
    runtime > anterior + RUNTIME_EPSILON            -> Running
    runtime sin avance, último avance <= stop_after -> Paused
    resto                                           -> Stopped

``is_running`` es True solo en Running.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

RUNTIME_EPSILON = 0.001


class SystemStatus(str, Enum):
    RUNNING = "Running"
    STOPPED = "Stopped"
    PAUSED = "Paused"
    IDLE = "Idle"


class SystemStatusTracker:
    def __init__(self, stop_after_seconds: float = 30.0) -> None:
        self.stop_after_seconds = stop_after_seconds
        self._previous_runtime: Optional[float] = None
        self._last_progress_at: Optional[float] = None
        self.status = SystemStatus.IDLE

    @property
    def is_running(self) -> bool:
        return self.status is SystemStatus.RUNNING

    def update(self, total_count: int, runtime_seconds: float, now: float) -> SystemStatus:
        """``now`` en segundos monotónicos."""

        previous = self._previous_runtime
        self._previous_runtime = runtime_seconds

        if total_count == 0 and runtime_seconds <= 0:
            status = SystemStatus.IDLE
        elif previous is None:
            status = SystemStatus.STOPPED
        elif runtime_seconds > previous + RUNTIME_EPSILON:
            self._last_progress_at = now
            status = SystemStatus.RUNNING
        elif (
            self._last_progress_at is not None
            and now - self._last_progress_at <= self.stop_after_seconds
        ):
            status = SystemStatus.PAUSED
        else:
            status = SystemStatus.STOPPED

        self.status = status
        return status

    def reset(self) -> None:
        self._previous_runtime = None
        self._last_progress_at = None
        self.status = SystemStatus.IDLE
