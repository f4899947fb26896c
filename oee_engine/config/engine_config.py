"""Configuración del motor (proceso), separada de la configuración del store.

EngineConfig controla cadencias, tamaños de ventana y flags de variante.
Lo que el operador ajusta en caliente (targets, turnos, umbrales) se lee
del store en cada refresh, ver config_reader.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class EngineConfig:
    """Parámetros del loop de cálculo OEE."""

    # Intervalo de tick si el store no define Inputs/System/UpdateRateMs
    tick_interval_ms: int = 1000
    config_refresh_seconds: float = 2.0

    history_size: int = 60
    trend_noise_filter: bool = False
    trend_noise_threshold: float = 0.1

    # Contadores negativos (reset de PLC) se leen como 0
    clamp_defects: bool = False

    shift_change_lead_seconds: float = 300.0
    shift_change_occurred_seconds: float = 0.5

    # 0 desactiva el reintento de outputs fallidos
    write_retry_cooldown_seconds: float = 30.0

    expected_parts_fallback: float = 480.0

    # Sin progreso de runtime durante más de esto -> Stopped (antes: Paused)
    stop_after_seconds: float = 30.0

    stop_join_timeout_seconds: float = 0.5
    seed_input_defaults: bool = True

    @classmethod
    def from_env(cls) -> "EngineConfig":
        return cls(
            tick_interval_ms=int(os.getenv("OEE_TICK_INTERVAL_MS", "1000")),
            config_refresh_seconds=float(os.getenv("OEE_CONFIG_REFRESH_SECONDS", "2.0")),
            history_size=int(os.getenv("OEE_HISTORY_SIZE", "60")),
            trend_noise_filter=_env_bool("OEE_TREND_NOISE_FILTER", False),
            trend_noise_threshold=float(os.getenv("OEE_TREND_NOISE_THRESHOLD", "0.1")),
            clamp_defects=_env_bool("OEE_CLAMP_DEFECTS", False),
            shift_change_lead_seconds=float(os.getenv("OEE_SHIFT_CHANGE_LEAD_SECONDS", "300")),
            shift_change_occurred_seconds=float(
                os.getenv("OEE_SHIFT_CHANGE_OCCURRED_SECONDS", "0.5")
            ),
            write_retry_cooldown_seconds=float(os.getenv("OEE_WRITE_RETRY_COOLDOWN", "30")),
            expected_parts_fallback=float(os.getenv("OEE_EXPECTED_PARTS_FALLBACK", "480")),
            stop_after_seconds=float(os.getenv("OEE_STOP_AFTER_SECONDS", "30")),
            stop_join_timeout_seconds=float(os.getenv("OEE_STOP_JOIN_TIMEOUT", "0.5")),
            seed_input_defaults=_env_bool("OEE_SEED_INPUT_DEFAULTS", True),
        )


DEFAULT_ENGINE_CONFIG = EngineConfig()
