"""Sesión de cálculo OEE para un activo.

Una sesión = un metrics root + un worker thread. Todo el estado mutable
(caches, historial, últimos valores escritos, tracker de estado) vive en la
instancia; varias sesiones no comparten nada.

Loop:
- stop_event.wait(intervalo) -> refresh de configuración si toca -> tick()
- Un tick que lanza excepción se loggea y se cuenta; el loop sigue
- stop() es cooperativo con join acotado
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional

from oee_engine.calculation.metrics_calculator import (
    CachedParameter,
    DerivedMetrics,
    RawCounters,
    compute,
    parse_ideal_cycle_seconds,
    parse_planned_seconds,
)
from oee_engine.calculation.production_analysis import ProductionAnalysis, analyze_production
from oee_engine.calculation.system_status import SystemStatus, SystemStatusTracker
from oee_engine.config.config_reader import (
    RuntimeConfiguration,
    ensure_input_defaults,
    read_configuration,
)
from oee_engine.config.engine_config import EngineConfig
from oee_engine.errors import OEEEngineError, ResolutionError
from oee_engine.output.output_writer import OutputWriter
from oee_engine.shift.shift_scheduler import ShiftState, compute_shift_state
from oee_engine.store import paths
from oee_engine.store.metrics_store import MetricsStore, Reference
from oee_engine.store.resolver import DataSourceResolver
from oee_engine.trends.trend_history import TrendHistory, WindowStatistics
from oee_engine.utils.coercion import read_double, read_int, read_raw
from oee_engine.utils.formatting import format_clock, format_duration, format_timestamp

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "Idle"
    RUNNING = "Running"


@dataclass(frozen=True)
class TickResult:
    timestamp: datetime
    counters: RawCounters
    metrics: DerivedMetrics
    shift: ShiftState
    production: ProductionAnalysis
    status: SystemStatus
    trends: Dict[str, str] = field(default_factory=dict)
    statistics: Dict[str, WindowStatistics] = field(default_factory=dict)
    target_deltas: Dict[str, float] = field(default_factory=dict)
    writes: int = 0

    @property
    def is_running(self) -> bool:
        return self.status is SystemStatus.RUNNING

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "runtime_seconds": self.counters.runtime_seconds,
            "good_count": self.counters.good_count,
            "bad_count": self.counters.bad_count,
            "metrics": self.metrics.to_dict(),
            "shift": self.shift.to_dict(),
            "production": self.production.to_dict(),
            "status": self.status.value,
            "is_running": self.is_running,
            "trends": dict(self.trends),
            "statistics": {
                m: {"min": s.min, "max": s.max, "avg": s.avg, "count": s.count}
                for m, s in self.statistics.items()
            },
            "target_deltas": dict(self.target_deltas),
            "writes": self.writes,
        }


class OEECalculatorSession:
    """Cálculo OEE periódico contra un metrics root.

    Uso:
        session = OEECalculatorSession(store, "Plant/Line1/Press")
        session.start()
        ...
        session.close()
    """

    def __init__(
        self,
        store: MetricsStore,
        reference: Reference,
        config: Optional[EngineConfig] = None,
        *,
        name: Optional[str] = None,
        clock: Callable[[], datetime] = datetime.now,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self._store = store
        self._reference = reference
        self._config = config or EngineConfig.from_env()
        self.name = name or str(reference)
        self._clock = clock
        self._monotonic = monotonic

        self._resolver = DataSourceResolver(store)
        self._root: Any = None
        self._handles: Dict[str, Any] = {}

        self._writer = OutputWriter(
            store,
            retry_cooldown_seconds=self._config.write_retry_cooldown_seconds,
            clock=monotonic,
        )
        self._history = TrendHistory(
            capacity=self._config.history_size,
            noise_filter=self._config.trend_noise_filter,
            noise_threshold=self._config.trend_noise_threshold,
        )
        self._status_tracker = SystemStatusTracker(self._config.stop_after_seconds)
        self._ideal_cache: CachedParameter[float] = CachedParameter(parse_ideal_cycle_seconds)
        self._planned_cache: CachedParameter[float] = CachedParameter(parse_planned_seconds)

        self._runtime_config = RuntimeConfiguration(update_rate_ms=self._config.tick_interval_ms)
        self._last_config_refresh: Optional[float] = None

        self._state = SessionState.IDLE
        self._start_requested = False
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._tick_lock = threading.RLock()
        # contadores: nunca se espera a un tick en curso para leerlos
        self._stats_lock = threading.Lock()

        self._ticks = 0
        self._errors = 0
        self._last_error: Optional[str] = None
        self._last_result: Optional[TickResult] = None

    # ------------------------------------------------------------------
    # Propiedades
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def root(self) -> Any:
        return self._root

    @property
    def reference(self) -> Reference:
        return self._reference

    @property
    def runtime_configuration(self) -> RuntimeConfiguration:
        return self._runtime_config

    @property
    def last_result(self) -> Optional[TickResult]:
        return self._last_result

    @property
    def history(self) -> TrendHistory:
        return self._history

    # ------------------------------------------------------------------
    # Ciclo de vida
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Resuelve el data source y arranca el worker.

        Si la resolución falla la sesión queda Idle; se reintenta con
        set_data_source().
        """

        if self._state is SessionState.RUNNING:
            return True

        self._start_requested = True
        try:
            root = self._resolver.resolve(self._reference)
        except ResolutionError as e:
            logger.error("[OEE_SESSION] %s: start failed, staying Idle: %s", self.name, e)
            return False

        with self._tick_lock:
            self._bind(root)
        self._spawn_worker()
        return True

    def stop(self) -> None:
        """Pide parada y espera al worker como mucho stop_join_timeout_seconds."""

        self._start_requested = False
        self._stop_event.set()
        thread = self._thread
        try:
            if thread is not None and thread is not threading.current_thread():
                thread.join(timeout=self._config.stop_join_timeout_seconds)
                if thread.is_alive():
                    logger.warning(
                        "[OEE_SESSION] %s: worker did not stop within %.1fs, releasing",
                        self.name,
                        self._config.stop_join_timeout_seconds,
                    )
        except Exception as e:
            logger.debug("[OEE_SESSION] %s: error during stop: %s", self.name, e)
        finally:
            self._thread = None
            if self._state is SessionState.RUNNING:
                self._log_info("[OEE_SESSION] %s: stopped", self.name)
            self._state = SessionState.IDLE

    def close(self) -> None:
        """stop() + suelta el root.

        Si un tick sigue colgado en el store tras la espera acotada, el root
        se suelta sin el lock: ese tick termina con los handles que ya tenía
        y el siguiente ve ``root is None``.
        """

        self.stop()
        timeout = self._config.stop_join_timeout_seconds
        acquired = self._tick_lock.acquire(timeout=timeout)
        try:
            if not acquired:
                logger.warning(
                    "[OEE_SESSION] %s: tick still running after %.1fs, releasing data source",
                    self.name,
                    timeout,
                )
            self._root = None
            self._handles = {}
            self._writer.bind({})
        finally:
            if acquired:
                self._tick_lock.release()

    def __enter__(self) -> "OEECalculatorSession":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _spawn_worker(self) -> None:
        # evento nuevo por worker: un worker anterior que aún no salió sigue parado
        self._stop_event = threading.Event()
        thread = threading.Thread(
            target=self._worker_loop,
            args=(self._stop_event,),
            daemon=True,
            name=f"oee-session-{self.name}",
        )
        self._thread = thread
        self._state = SessionState.RUNNING
        thread.start()
        self._log_info(
            "[OEE_SESSION] %s: started root=%s interval=%dms",
            self.name,
            self.describe_data_source(),
            self._runtime_config.update_rate_ms,
        )

    def _worker_loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._runtime_config.tick_interval_seconds):
            try:
                self.tick()
            except Exception as e:
                self._record_error(e)

    # ------------------------------------------------------------------
    # Operaciones de control
    # ------------------------------------------------------------------

    def force_recalculate(self) -> Optional[TickResult]:
        """Ejecuta un tick de forma síncrona. None si no hay root o el tick falla."""

        if self._root is None:
            logger.warning("[OEE_SESSION] %s: recalculate requested without data source", self.name)
            return None
        try:
            return self.tick()
        except Exception as e:
            self._record_error(e)
            return None

    def set_data_source(self, reference: Reference) -> bool:
        """Re-apunta la sesión a otro metrics root.

        La resolución ocurre fuera del lock; si falla se mantiene el root
        actual. Si tiene éxito, el cambio de root y el rebind son atómicos
        respecto a tick(): el siguiente tick ya lee y escribe solo el nuevo.
        """

        try:
            root = self._resolver.resolve(reference)
        except ResolutionError as e:
            logger.error(
                "[OEE_SESSION] %s: repoint failed, keeping %s: %s",
                self.name,
                self.describe_data_source(),
                e,
            )
            return False

        with self._tick_lock:
            self._reference = reference
            self._bind(root)

        self._log_info("[OEE_SESSION] %s: data source -> %s", self.name, self.describe_data_source())

        if self._start_requested and self._state is SessionState.IDLE:
            self._spawn_worker()
        return True

    def describe_data_source(self) -> str:
        root = self._root
        if root is None:
            return "<unresolved>"
        try:
            return self._store.describe(root)
        except Exception as e:
            logger.debug("[OEE_SESSION] describe failed: %s", e)
            return repr(root)

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def _bind(self, root: Any) -> None:
        """Reconstruye handles y descarta todo el estado del root anterior."""

        handles: Dict[str, Any] = {}
        missing = []
        for path in paths.ALL_PATHS:
            try:
                handle = self._store.get(root, path)
            except Exception as e:
                logger.debug("[OEE_SESSION] get(%s) failed: %s", path, e)
                handle = None
            handles[path] = handle
            if handle is None:
                missing.append(path)

        self._root = root
        self._handles = handles
        self._writer.bind(handles)
        self._history.clear()
        self._status_tracker.reset()
        self._ideal_cache.clear()
        self._planned_cache.clear()
        self._last_result = None

        if missing:
            logger.warning(
                "[OEE_SESSION] %s: %d paths missing under %s (first: %s)",
                self.name,
                len(missing),
                self.describe_data_source(),
                missing[0],
            )

        if self._config.seed_input_defaults:
            seeded = ensure_input_defaults(self._store, handles)
            if seeded:
                logger.info("[OEE_SESSION] %s: seeded %d input defaults", self.name, seeded)

        self._refresh_configuration()

    def _refresh_configuration(self) -> None:
        self._runtime_config = read_configuration(
            self._store,
            self._handles,
            default_update_rate_ms=self._config.tick_interval_ms,
            default_lead_seconds=self._config.shift_change_lead_seconds,
        )
        self._last_config_refresh = self._monotonic()

    def _refresh_configuration_if_due(self) -> None:
        last = self._last_config_refresh
        if last is None or self._monotonic() - last >= self._config.config_refresh_seconds:
            self._refresh_configuration()

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self, now: Optional[datetime] = None) -> TickResult:
        with self._tick_lock:
            if self._root is None:
                raise OEEEngineError(f"session {self.name!r} has no data source bound")

            self._refresh_configuration_if_due()
            cfg = self._runtime_config
            now = now or self._clock()

            counters = self._read_counters()
            ideal = self._ideal_cache.get(
                read_raw(self._store, self._handles.get(paths.IDEAL_CYCLE_TIME_SECONDS))
            )
            planned = self._planned_cache.get(
                read_raw(self._store, self._handles.get(paths.PLANNED_PRODUCTION_TIME_HOURS))
            )

            metrics = compute(
                counters,
                ideal,
                planned,
                clamp_defects=self._config.clamp_defects,
                expected_parts_fallback=self._config.expected_parts_fallback,
            )
            shift = compute_shift_state(
                now,
                cfg.shift,
                occurred_window_seconds=self._config.shift_change_occurred_seconds,
            )
            status = self._status_tracker.update(
                metrics.total_count, counters.runtime_seconds, self._monotonic()
            )
            production = analyze_production(
                metrics,
                counters.runtime_seconds,
                cfg.targets.production,
                shift.shift_end,
                now,
                cfg.flags,
            )

            self._history.append(metrics)
            trends = self._history.trends()
            statistics = self._history.all_statistics()
            deltas = {
                m: metrics.for_metric(m) - cfg.targets.for_metric(m) for m in paths.TRACKED_METRICS
            }

            outputs = self._build_outputs(
                now, counters, metrics, shift, production, status, trends, statistics, deltas
            )
            writes = self._writer.write_many(outputs)

            result = TickResult(
                timestamp=now,
                counters=counters,
                metrics=metrics,
                shift=shift,
                production=production,
                status=status,
                trends=trends,
                statistics=statistics,
                target_deltas=deltas,
                writes=writes,
            )
            with self._stats_lock:
                self._ticks += 1
            self._last_result = result

        if cfg.verbose and cfg.logging_verbosity >= 2:
            logger.info(
                "[OEE_SESSION] %s: OEE=%.2f Q=%.2f P=%.2f A=%.2f status=%s writes=%d",
                self.name,
                metrics.oee,
                metrics.quality,
                metrics.performance,
                metrics.availability,
                status.value,
                writes,
            )
        return result

    def _read_counters(self) -> RawCounters:
        h = self._handles.get
        return RawCounters(
            runtime_seconds=read_double(self._store, h(paths.RUNTIME_SECONDS), 0.0),
            good_count=read_int(self._store, h(paths.GOOD_PART_COUNT), 0),
            bad_count=read_int(self._store, h(paths.BAD_PART_COUNT), 0),
        )

    def _build_outputs(
        self,
        now: datetime,
        counters: RawCounters,
        metrics: DerivedMetrics,
        shift: ShiftState,
        production: ProductionAnalysis,
        status: SystemStatus,
        trends: Dict[str, str],
        statistics: Dict[str, WindowStatistics],
        deltas: Dict[str, float],
    ) -> Dict[str, Any]:
        outputs: Dict[str, Any] = {
            paths.OUT_TOTAL_COUNT: metrics.total_count,
            paths.OUT_QUALITY: metrics.quality,
            paths.OUT_PERFORMANCE: metrics.performance,
            paths.OUT_AVAILABILITY: metrics.availability,
            paths.OUT_OEE: metrics.oee,
            paths.OUT_AVG_CYCLE_TIME: metrics.avg_cycle_time,
            paths.OUT_PARTS_PER_HOUR: metrics.parts_per_hour,
            paths.OUT_EXPECTED_PART_COUNT: metrics.expected_part_count,
            paths.OUT_DOWNTIME_SECONDS: metrics.downtime_seconds,
            paths.OUT_HOURS_PER_SHIFT: shift.hours_per_shift,
            paths.OUT_CURRENT_SHIFT_NUMBER: shift.shift_number,
            paths.OUT_SHIFT_START_TIME: format_clock(shift.shift_start),
            paths.OUT_SHIFT_END_TIME: format_clock(shift.shift_end),
            paths.OUT_TIME_INTO_SHIFT: format_duration(shift.elapsed_seconds),
            paths.OUT_TIME_REMAINING_IN_SHIFT: format_duration(shift.remaining_seconds),
            paths.OUT_SHIFT_CHANGE_OCCURRED: shift.change_occurred,
            paths.OUT_SHIFT_CHANGE_IMMINENT: shift.change_imminent,
            paths.OUT_SHIFT_PROGRESS: shift.progress_percent,
            paths.OUT_PROJECTED_TOTAL_COUNT: production.projected_total_count,
            paths.OUT_REMAINING_TIME_AT_CURRENT_RATE: production.remaining_time_at_current_rate,
            paths.OUT_PRODUCTION_BEHIND_SCHEDULE: production.behind_schedule,
            paths.OUT_REQUIRED_RATE_TO_TARGET: production.required_rate_to_target,
            paths.OUT_TARGET_VS_ACTUAL_PARTS: production.target_vs_actual,
            paths.OUT_PRODUCTION_PROGRESS: production.production_progress,
            paths.OUT_SYSTEM_STATUS: status.value,
            paths.OUT_IS_RUNNING: status is SystemStatus.RUNNING,
            paths.OUT_CALCULATION_VALID: production.calculation_valid,
            paths.OUT_DATA_QUALITY_SCORE: production.data_quality_score,
            paths.OUT_LAST_UPDATE_TIME: format_timestamp(now),
            paths.OUT_DOWNTIME_FORMATTED: format_duration(metrics.downtime_seconds),
            paths.OUT_TOTAL_RUNTIME_FORMATTED: format_duration(counters.runtime_seconds),
        }

        for metric in paths.TRACKED_METRICS:
            outputs[paths.trend_path(metric)] = trends[metric]
            outputs[paths.target_delta_path(metric)] = deltas[metric]
            stats = statistics[metric]
            if stats.count:
                outputs[paths.statistic_path("Min", metric)] = stats.min
                outputs[paths.statistic_path("Max", metric)] = stats.max
                outputs[paths.statistic_path("Avg", metric)] = stats.avg
        return outputs

    # ------------------------------------------------------------------
    # Diagnóstico
    # ------------------------------------------------------------------

    def _record_error(self, error: Exception) -> None:
        with self._stats_lock:
            self._errors += 1
            self._last_error = str(error)
        logger.error("[OEE_SESSION] %s: tick failed: %s", self.name, error)

    def _log_info(self, msg: str, *args: Any) -> None:
        if self._runtime_config.verbose:
            logger.info(msg, *args)

    def get_stats(self) -> dict:
        last = self._last_result
        with self._stats_lock:
            ticks = self._ticks
            errors = self._errors
            last_error = self._last_error
        return {
            "name": self.name,
            "state": self._state.value,
            "data_source": self.describe_data_source(),
            "reference": str(self._reference),
            "ticks": ticks,
            "errors": errors,
            "last_error": last_error,
            "update_rate_ms": self._runtime_config.update_rate_ms,
            "history_samples": len(self._history),
            "last_tick": last.timestamp.isoformat() if last else None,
            "writer": self._writer.get_stats(),
        }
