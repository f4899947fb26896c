"""Formato de duraciones y timestamps para los outputs.

Solo se usa al escribir en el store, nunca dentro de los cálculos.
"""

from __future__ import annotations

import math
from datetime import datetime

CLOCK_FORMAT = "%H:%M:%S"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_duration(total_seconds: float) -> str:
    """Segundos -> ``HH:MM:SS``, o ``Nd HH:MM:SS`` a partir de un día.

    Duraciones negativas o no finitas -> ``00:00:00``.
    """
    if not math.isfinite(total_seconds) or total_seconds < 0:
        return "00:00:00"

    whole = int(total_seconds)
    days, rest = divmod(whole, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)

    if days >= 1:
        return f"{days}d {hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_clock(value: datetime) -> str:
    return value.strftime(CLOCK_FORMAT)


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)
