from .config_reader import (
    RuntimeConfiguration,
    ShiftConfig,
    SystemFlags,
    Targets,
    ensure_input_defaults,
    read_configuration,
)
from .engine_config import DEFAULT_ENGINE_CONFIG, EngineConfig

__all__ = [
    "DEFAULT_ENGINE_CONFIG",
    "EngineConfig",
    "RuntimeConfiguration",
    "ShiftConfig",
    "SystemFlags",
    "Targets",
    "ensure_input_defaults",
    "read_configuration",
]
