"""Funciones canónicas de coerción de valores del store.

Los valores que llegan del store son "loosely typed": pueden ser None, bool,
int, float, str o incluso tipos de fecha. Estas funciones los convierten al
tipo esperado y devuelven siempre un valor tipado junto con un indicador de
fallback. Nunca lanzan excepciones.

Política:
- None / handle ausente -> fallback
- bool NO se considera numérico (True no es 1.0 para un contador)
- Strings se parsean con reglas invariantes (punto decimal, coma de miles)
- NaN / Infinity -> fallback
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, time, timedelta
from typing import Any, NamedTuple, Optional

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400

_TRUE_STRINGS = ("true", "1", "yes")
_FALSE_STRINGS = ("false", "0", "no")


class Coerced(NamedTuple):
    value: Any
    is_fallback: bool


def coerce_double(raw: Any, fallback: float) -> Coerced:
    """Convierte a float con validación de NaN/Infinity."""
    if raw is None or isinstance(raw, bool):
        return Coerced(fallback, True)

    if isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError:
            # int fuera del rango de float
            return Coerced(fallback, True)
    elif isinstance(raw, str):
        text = raw.strip().replace(",", "")
        if not text:
            return Coerced(fallback, True)
        try:
            value = float(text)
        except ValueError:
            return Coerced(fallback, True)
    else:
        try:
            value = float(raw)
        except (TypeError, ValueError, OverflowError):
            return Coerced(fallback, True)

    if not math.isfinite(value):
        return Coerced(fallback, True)
    return Coerced(value, False)


def coerce_int(raw: Any, fallback: int) -> Coerced:
    if raw is None or isinstance(raw, bool):
        return Coerced(fallback, True)
    if isinstance(raw, int):
        return Coerced(raw, False)
    if isinstance(raw, float):
        if math.isfinite(raw) and raw.is_integer():
            return Coerced(int(raw), False)
        return Coerced(fallback, True)
    if isinstance(raw, str):
        try:
            return Coerced(int(raw.strip(), 10), False)
        except ValueError:
            return Coerced(fallback, True)
    return Coerced(fallback, True)


def coerce_bool(raw: Any, fallback: bool) -> Coerced:
    if raw is None:
        return Coerced(fallback, True)
    if isinstance(raw, bool):
        return Coerced(raw, False)
    if isinstance(raw, int):
        return Coerced(raw != 0, False)
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in _TRUE_STRINGS:
            return Coerced(True, False)
        if text in _FALSE_STRINGS:
            return Coerced(False, False)
    return Coerced(fallback, True)


def coerce_string(raw: Any, fallback: str) -> Coerced:
    if raw is None:
        return Coerced(fallback, True)
    text = raw if isinstance(raw, str) else str(raw)
    if not text.strip():
        return Coerced(fallback, True)
    return Coerced(text, False)


def coerce_time_of_day(raw: Any, fallback: float) -> Coerced:
    """Convierte a segundos desde medianoche.

    Acepta datetime, time, timedelta y strings "HH:MM", "HH:MM:SS",
    ISO datetime o "HHMM" (p.ej. "0600").
    """
    if raw is None or isinstance(raw, bool):
        return Coerced(fallback, True)
    if isinstance(raw, datetime):
        return Coerced(_seconds_of(raw.time()), False)
    if isinstance(raw, time):
        return Coerced(_seconds_of(raw), False)
    if isinstance(raw, timedelta):
        seconds = raw.total_seconds()
        if 0 <= seconds < SECONDS_PER_DAY:
            return Coerced(seconds, False)
        return Coerced(fallback, True)
    if not isinstance(raw, str):
        return Coerced(fallback, True)

    text = raw.strip()
    if not text:
        return Coerced(fallback, True)

    parsed = _parse_clock(text)
    if parsed is None and len(text) == 4 and text.isdigit():
        hours, minutes = int(text[:2]), int(text[2:])
        if hours < 24 and minutes < 60:
            parsed = float(hours * 3600 + minutes * 60)
    if parsed is None and len(text) > 4:
        try:
            parsed = _seconds_of(datetime.fromisoformat(text).time())
        except ValueError:
            parsed = None

    if parsed is None:
        return Coerced(fallback, True)
    return Coerced(parsed, False)


def _parse_clock(text: str) -> Optional[float]:
    parts = text.split(":")
    if len(parts) not in (2, 3):
        return None
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = float(parts[2]) if len(parts) == 3 else 0.0
    except ValueError:
        return None
    if not (0 <= hours < 24 and 0 <= minutes < 60 and 0 <= seconds < 60):
        return None
    return hours * 3600 + minutes * 60 + seconds


def _seconds_of(value: time) -> float:
    return value.hour * 3600 + value.minute * 60 + value.second + value.microsecond / 1e6


# ---------------------------------------------------------------------------
# Lectores sobre el store
# ---------------------------------------------------------------------------


def read_raw(store, handle) -> Any:
    """Lee el valor crudo de un handle. Handle ausente o error -> None."""
    if handle is None:
        return None
    try:
        return store.read(handle)
    except Exception as e:
        logger.debug("read failed for handle=%r err=%s", handle, e)
        return None


def read_double(store, handle, fallback: float) -> float:
    return coerce_double(read_raw(store, handle), fallback).value


def read_int(store, handle, fallback: int) -> int:
    return coerce_int(read_raw(store, handle), fallback).value


def read_bool(store, handle, fallback: bool) -> bool:
    return coerce_bool(read_raw(store, handle), fallback).value


def read_string(store, handle, fallback: str) -> str:
    return coerce_string(read_raw(store, handle), fallback).value
