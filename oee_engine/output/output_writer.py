from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

from .output_circuit import OutputCircuit

logger = logging.getLogger(__name__)

NUMERIC_TOLERANCE = 0.001


def values_equal(previous: Any, current: Any) -> bool:
    """Igualdad para decidir si reescribir un output.

    Números dentro de NUMERIC_TOLERANCE; bool y str exactos.
    Un cambio de tipo siempre cuenta como cambio.
    """

    if type(previous) is not type(current):
        return False
    if isinstance(current, bool):
        return previous == current
    if isinstance(current, (int, float)):
        return abs(previous - current) <= NUMERIC_TOLERANCE
    return previous == current


class OutputWriter:
    """Escritura de outputs con cache del último valor y circuito por output.

    - Handle ausente: se salta sin error (outputs opcionales)
    - Valor igual al último escrito: no se escribe
    - Fallo de escritura: se loggea y el output queda "no presente" hasta
      que expire el cooldown
    """

    def __init__(
        self,
        store,
        retry_cooldown_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._retry_cooldown_seconds = retry_cooldown_seconds
        self._clock = clock

        self._handles: Dict[str, Any] = {}
        self._last_written: Dict[str, Any] = {}
        self._circuits: Dict[str, OutputCircuit] = {}

        self._writes = 0
        self._skipped_unchanged = 0
        self._skipped_missing = 0
        self._skipped_open = 0
        self._failures = 0

    def bind(self, handles: Mapping[str, Any]) -> None:
        """Reemplaza los handles y descarta todo el estado del root anterior."""
        self._handles = dict(handles)
        self.reset()

    def reset(self) -> None:
        self._last_written.clear()
        self._circuits.clear()

    def is_present(self, path: str) -> bool:
        if self._handles.get(path) is None:
            return False
        circuit = self._circuits.get(path)
        return circuit is None or not circuit.is_open

    def last_written(self, path: str) -> Optional[Any]:
        return self._last_written.get(path)

    def write_if_changed(self, path: str, value: Any) -> bool:
        """Devuelve True solo si se hizo una escritura real en el store."""

        handle = self._handles.get(path)
        if handle is None:
            self._skipped_missing += 1
            return False

        if path in self._last_written and values_equal(self._last_written[path], value):
            self._skipped_unchanged += 1
            return False

        circuit = self._circuits.get(path)
        if circuit is not None and not circuit.allow():
            self._skipped_open += 1
            return False

        try:
            self._store.write(handle, value)
        except Exception as e:
            self._failures += 1
            if circuit is None:
                circuit = OutputCircuit(path, self._retry_cooldown_seconds, self._clock)
                self._circuits[path] = circuit
            circuit.record_failure(e)
            return False

        if circuit is not None:
            circuit.record_success()
        self._last_written[path] = value
        self._writes += 1
        return True

    def write_many(self, values: Mapping[str, Any]) -> int:
        """Escribe cada output de forma independiente. Devuelve cuántos se escribieron."""
        return sum(1 for path, value in values.items() if self.write_if_changed(path, value))

    def get_stats(self) -> dict:
        return {
            "writes": self._writes,
            "skipped_unchanged": self._skipped_unchanged,
            "skipped_missing": self._skipped_missing,
            "skipped_open": self._skipped_open,
            "failures": self._failures,
            "bound_outputs": sum(1 for h in self._handles.values() if h is not None),
            "open_outputs": [c.get_stats() for c in self._circuits.values() if c.is_open],
        }
