"""Lectura de la configuración de operador desde el metrics root.

Todo lo que se lee pasa por la librería de coerción: un valor ausente,
no convertible o fuera de rango cae al default y nunca interrumpe el tick.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from oee_engine.store import paths
from oee_engine.utils.coercion import (
    SECONDS_PER_DAY,
    coerce_bool,
    coerce_double,
    coerce_int,
    coerce_string,
    coerce_time_of_day,
    read_bool,
    read_double,
    read_int,
    read_raw,
)

logger = logging.getLogger(__name__)

# path -> handle (None si el path no existe bajo el root)
HandleMap = Mapping[str, Any]

DEFAULT_SHIFT1_START_SECONDS = 6 * 3600.0
MIN_SHIFTS = 1
MAX_SHIFTS = 3


@dataclass(frozen=True)
class Targets:
    quality: float = 95.0
    performance: float = 85.0
    availability: float = 90.0
    oee: float = 72.7
    production: int = 1000

    def for_metric(self, metric: str) -> float:
        return {
            "Quality": self.quality,
            "Performance": self.performance,
            "Availability": self.availability,
            "OEE": self.oee,
        }[metric]


@dataclass(frozen=True)
class ShiftConfig:
    number_of_shifts: int = 3
    shift1_start_seconds: float = DEFAULT_SHIFT1_START_SECONDS
    change_lead_seconds: float = 300.0

    @property
    def shift_duration_seconds(self) -> float:
        return SECONDS_PER_DAY / self.number_of_shifts

    @property
    def hours_per_shift(self) -> float:
        return 24.0 / self.number_of_shifts


@dataclass(frozen=True)
class SystemFlags:
    enable_real_time_calc: bool = True
    minimum_run_time: float = 60.0
    good_oee_threshold: float = 80.0
    poor_oee_threshold: float = 60.0
    enable_logging: bool = True
    enable_alarms: bool = True
    system_healthy: bool = True


@dataclass(frozen=True)
class RuntimeConfiguration:
    targets: Targets = field(default_factory=Targets)
    shift: ShiftConfig = field(default_factory=ShiftConfig)
    flags: SystemFlags = field(default_factory=SystemFlags)
    update_rate_ms: int = 1000
    logging_verbosity: int = 1

    @property
    def tick_interval_seconds(self) -> float:
        return self.update_rate_ms / 1000.0

    @property
    def verbose(self) -> bool:
        """Logs informativos por sesión habilitados."""
        return self.flags.enable_logging and self.logging_verbosity > 0


def read_configuration(
    store,
    handles: HandleMap,
    *,
    default_update_rate_ms: int = 1000,
    default_lead_seconds: float = 300.0,
) -> RuntimeConfiguration:
    """Lee targets, turnos, flags y cadencia. Nunca lanza."""

    def h(path: str) -> Optional[Any]:
        return handles.get(path)

    targets = Targets(
        quality=_read_percent(store, h(paths.QUALITY_TARGET), Targets.quality),
        performance=_read_percent(store, h(paths.PERFORMANCE_TARGET), Targets.performance),
        availability=_read_percent(store, h(paths.AVAILABILITY_TARGET), Targets.availability),
        oee=_read_percent(store, h(paths.OEE_TARGET), Targets.oee),
        production=_read_production_target(store, h(paths.PRODUCTION_TARGET)),
    )

    shifts = read_int(store, h(paths.NUMBER_OF_SHIFTS), 3)
    shift1_start = coerce_time_of_day(
        read_raw(store, h(paths.SHIFT_START_TIME)), DEFAULT_SHIFT1_START_SECONDS
    ).value
    lead = read_double(store, h(paths.SHIFT_CHANGE_LEAD_SECONDS), default_lead_seconds)
    if lead < 0:
        lead = default_lead_seconds

    shift = ShiftConfig(
        number_of_shifts=max(MIN_SHIFTS, min(MAX_SHIFTS, shifts)),
        shift1_start_seconds=shift1_start,
        change_lead_seconds=lead,
    )

    defaults = SystemFlags()
    flags = SystemFlags(
        enable_real_time_calc=read_bool(
            store, h(paths.ENABLE_REAL_TIME_CALC), defaults.enable_real_time_calc
        ),
        minimum_run_time=max(
            0.0, read_double(store, h(paths.MINIMUM_RUN_TIME), defaults.minimum_run_time)
        ),
        good_oee_threshold=_read_percent(
            store, h(paths.GOOD_OEE_THRESHOLD), defaults.good_oee_threshold
        ),
        poor_oee_threshold=_read_percent(
            store, h(paths.POOR_OEE_THRESHOLD), defaults.poor_oee_threshold
        ),
        enable_logging=read_bool(store, h(paths.ENABLE_LOGGING), defaults.enable_logging),
        enable_alarms=read_bool(store, h(paths.ENABLE_ALARMS), defaults.enable_alarms),
        system_healthy=read_bool(store, h(paths.SYSTEM_HEALTHY), defaults.system_healthy),
    )

    update_rate_ms = read_int(store, h(paths.UPDATE_RATE_MS), default_update_rate_ms)
    if update_rate_ms <= 0:
        update_rate_ms = default_update_rate_ms

    verbosity = read_int(store, h(paths.LOGGING_VERBOSITY), 1)

    return RuntimeConfiguration(
        targets=targets,
        shift=shift,
        flags=flags,
        update_rate_ms=update_rate_ms,
        logging_verbosity=max(0, verbosity),
    )


def _read_percent(store, handle, fallback: float) -> float:
    value = read_double(store, handle, fallback)
    if not 0.0 <= value <= 100.0:
        return fallback
    return value


def _read_production_target(store, handle) -> int:
    value = read_double(store, handle, float(Targets.production))
    if value < 0:
        return Targets.production
    return int(value)


# ---------------------------------------------------------------------------
# Defaults visibles para el operador
# ---------------------------------------------------------------------------

# (path, default, requiere > 0)
INPUT_DEFAULTS = (
    (paths.RUNTIME_SECONDS, 0.0, False),
    (paths.GOOD_PART_COUNT, 0, False),
    (paths.BAD_PART_COUNT, 0, False),
    (paths.IDEAL_CYCLE_TIME_SECONDS, 30.0, True),
    (paths.PLANNED_PRODUCTION_TIME_HOURS, 8.0, True),
    (paths.NUMBER_OF_SHIFTS, 3, True),
    (paths.SHIFT_START_TIME, "06:00:00", False),
    (paths.PRODUCTION_TARGET, 1000, True),
    (paths.UPDATE_RATE_MS, 1000, True),
    (paths.QUALITY_TARGET, 95.0, True),
    (paths.PERFORMANCE_TARGET, 85.0, True),
    (paths.AVAILABILITY_TARGET, 90.0, True),
    (paths.OEE_TARGET, 72.7, True),
    (paths.LOGGING_VERBOSITY, 1, False),
    (paths.ENABLE_REAL_TIME_CALC, True, False),
    (paths.MINIMUM_RUN_TIME, 60.0, False),
    (paths.GOOD_OEE_THRESHOLD, 80.0, False),
    (paths.POOR_OEE_THRESHOLD, 60.0, False),
    (paths.ENABLE_LOGGING, True, False),
    (paths.ENABLE_ALARMS, True, False),
    (paths.SYSTEM_HEALTHY, True, False),
)


def needs_default(raw: Any, default: Any, positive: bool) -> bool:
    """True si ``raw`` está vacío o no es válido para el tipo de ``default``."""

    if isinstance(default, bool):
        return coerce_bool(raw, default).is_fallback
    if isinstance(default, int):
        coerced = coerce_int(raw, default)
        return coerced.is_fallback or (positive and coerced.value <= 0)
    if isinstance(default, float):
        coerced = coerce_double(raw, default)
        return coerced.is_fallback or (positive and coerced.value <= 0)
    return coerce_string(raw, default).is_fallback


def ensure_input_defaults(store, handles: HandleMap) -> int:
    """Escribe defaults en inputs vacíos/ inválidos para que el operador los vea.

    Devuelve cuántos valores se escribieron. Un input ausente o que el
    store rechaza se loggea y se ignora.
    """

    written = 0
    for path, default, positive in INPUT_DEFAULTS:
        handle = handles.get(path)
        if handle is None:
            logger.debug("[CONFIG] input %s not found, default not seeded", path)
            continue
        if not needs_default(read_raw(store, handle), default, positive):
            continue
        try:
            store.write(handle, default)
        except Exception as e:
            logger.warning("[CONFIG] cannot seed default for %s: %s", path, e)
            continue
        written += 1
        logger.debug("[CONFIG] default %s=%r", path, default)
    return written
