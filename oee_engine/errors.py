"""Excepciones del motor OEE."""

from __future__ import annotations

from typing import Any


class OEEEngineError(Exception):
    """Base de todos los errores del motor."""


class ResolutionError(OEEEngineError):
    """La referencia al data source está vacía o no se pudo resolver."""

    def __init__(self, reference: Any, reason: str):
        self.reference = reference
        self.reason = reason
        super().__init__(f"Cannot resolve data source {reference!r}: {reason}")


class WriteError(OEEEngineError):
    """El store rechazó la escritura de un output."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Write rejected for '{path}': {reason}")
