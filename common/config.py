from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _default_env_file() -> str:
    # .env junto al repo; el entorno real siempre tiene prioridad.
    repo_root = Path(__file__).resolve().parents[1]
    return str(repo_root / ".env")


@dataclass(frozen=True)
class Settings:
    log_level: str

    # Referencias de data source separadas por coma (una sesión por referencia)
    data_source: Optional[str]

    # Árbol JSON para el store en memoria del CLI
    tree_file: Optional[str]

    @property
    def data_sources(self) -> list[str]:
        if not self.data_source:
            return []
        return [ref.strip() for ref in self.data_source.split(",") if ref.strip()]


def load_env_file() -> None:
    env_file = os.getenv("OEE_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    load_env_file()

    return Settings(
        log_level=os.getenv("OEE_LOG_LEVEL", "INFO").upper(),
        data_source=os.getenv("OEE_DATA_SOURCE") or None,
        tree_file=os.getenv("OEE_TREE_FILE") or None,
    )
