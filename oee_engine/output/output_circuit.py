"""Circuit breaker por output.

Un fallo de escritura abre el circuito: el output se considera "no presente"
y los ticks siguientes lo saltan. Pasado el cooldown pasa a HALF_OPEN y el
siguiente tick hace un único intento; éxito -> CLOSED, fallo -> OPEN.
Con cooldown 0 el circuito no se vuelve a probar nunca.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class CircuitState(str, Enum):
    """Estados del circuit breaker."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class OutputCircuit:
    def __init__(
        self,
        path: str,
        retry_cooldown_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.path = path
        self.retry_cooldown_seconds = retry_cooldown_seconds
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: float = 0.0
        self._last_error = ""

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == CircuitState.OPEN

    def allow(self) -> bool:
        """True si se puede intentar escribir en este tick."""
        if self._state == CircuitState.OPEN:
            if self.retry_cooldown_seconds <= 0:
                return False
            if self._clock() - self._opened_at < self.retry_cooldown_seconds:
                return False
            self._state = CircuitState.HALF_OPEN
            logger.info("[OUTPUT] '%s': OPEN -> HALF_OPEN (retrying write)", self.path)
        return True

    def record_success(self) -> None:
        if self._state == CircuitState.HALF_OPEN:
            logger.info("[OUTPUT] '%s': HALF_OPEN -> CLOSED (recovered)", self.path)
        self._state = CircuitState.CLOSED
        self._failure_count = 0

    def record_failure(self, error: Exception) -> None:
        previous = self._state
        self._state = CircuitState.OPEN
        self._failure_count += 1
        self._opened_at = self._clock()
        self._last_error = str(error)[:100]
        logger.warning(
            "[OUTPUT] '%s': %s -> OPEN (failures=%d, error=%s)",
            self.path,
            previous.name,
            self._failure_count,
            self._last_error,
        )

    def remaining_cooldown(self) -> float:
        if self._state != CircuitState.OPEN or self.retry_cooldown_seconds <= 0:
            return 0.0
        return max(0.0, self.retry_cooldown_seconds - (self._clock() - self._opened_at))

    def get_stats(self) -> dict:
        return {
            "path": self.path,
            "state": self._state.value,
            "failure_count": self._failure_count,
            "last_error": self._last_error,
            "retry_in_seconds": round(self.remaining_cooldown(), 1),
        }
