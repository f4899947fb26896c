"""Cálculo de turno actual a partir del reloj de pared.

El día se parte en N turnos iguales a partir de la hora de inicio del turno 1.
Las señales de cambio de turno son por nivel: valen True mientras el tiempo
restante esté dentro de la ventana, no en el flanco.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from oee_engine.config.config_reader import ShiftConfig
from oee_engine.utils.coercion import SECONDS_PER_DAY

DEFAULT_OCCURRED_WINDOW_SECONDS = 0.5


@dataclass(frozen=True)
class ShiftState:
    shift_number: int
    shift_start: datetime
    shift_end: datetime
    elapsed_seconds: float
    remaining_seconds: float
    progress_percent: float
    hours_per_shift: float
    change_imminent: bool
    change_occurred: bool

    def to_dict(self) -> dict:
        return {
            "shift_number": self.shift_number,
            "shift_start": self.shift_start.isoformat(),
            "shift_end": self.shift_end.isoformat(),
            "elapsed_seconds": self.elapsed_seconds,
            "remaining_seconds": self.remaining_seconds,
            "progress_percent": self.progress_percent,
            "hours_per_shift": self.hours_per_shift,
            "change_imminent": self.change_imminent,
            "change_occurred": self.change_occurred,
        }


def compute_shift_state(
    now: datetime,
    config: ShiftConfig,
    *,
    occurred_window_seconds: float = DEFAULT_OCCURRED_WINDOW_SECONDS,
) -> ShiftState:
    shifts = config.number_of_shifts
    duration = config.shift_duration_seconds

    midnight = datetime.combine(now.date(), datetime.min.time(), tzinfo=now.tzinfo)
    time_of_day = (now - midnight).total_seconds()

    since_shift1 = time_of_day - config.shift1_start_seconds
    if since_shift1 < 0:
        since_shift1 += SECONDS_PER_DAY

    index = int(since_shift1 // duration) % shifts

    start = midnight + timedelta(seconds=config.shift1_start_seconds + index * duration)
    if start > now:
        start -= timedelta(days=1)
    end = start + timedelta(seconds=duration)

    elapsed = (now - start).total_seconds()
    remaining = duration - elapsed
    progress = max(0.0, min(100.0, elapsed / duration * 100.0))

    return ShiftState(
        shift_number=index + 1,
        shift_start=start,
        shift_end=end,
        elapsed_seconds=elapsed,
        remaining_seconds=remaining,
        progress_percent=progress,
        hours_per_shift=config.hours_per_shift,
        change_imminent=0 < remaining <= config.change_lead_seconds,
        change_occurred=0 < remaining <= occurred_window_seconds,
    )
