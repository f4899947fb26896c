from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union

# Valores que viajan por el store: Null | Bool | Int | Float | String
ScalarValue = Union[None, bool, int, float, str]

EMPTY_GUID = "00000000-0000-0000-0000-000000000000"


@dataclass(frozen=True)
class NodeId:
    """Identificador estructurado de un nodo del store."""

    identifier: str
    namespace: int = 0

    def __str__(self) -> str:
        return f"ns={self.namespace};{self.identifier}"

    @property
    def is_empty(self) -> bool:
        return not self.identifier.strip() or self.identifier == EMPTY_GUID


Reference = Union[NodeId, str]


class MetricsStore(Protocol):
    """Interfaz abstracta del store de métricas.

    El motor OEE solo depende de esta interfaz: resolver un root, obtener
    handles por path relativo, leer y escribir valores. La implementación
    concreta (host HMI, OPC UA, memoria) queda fuera del motor.
    """

    def resolve_identifier(self, reference: Reference) -> Optional[Any]:
        """Resolución por identificador. Devuelve el nodo o None."""

        ...

    def resolve_path(self, reference: str) -> Optional[Any]:
        """Resolución por path (p.ej. "Plant/Line1/Press"). Devuelve el nodo o None."""

        ...

    def get(self, root: Any, path: str) -> Optional[Any]:
        """Handle de un valor bajo ``root`` o None si no existe."""

        ...

    def read(self, handle: Any) -> ScalarValue:
        ...

    def write(self, handle: Any, value: ScalarValue) -> None:
        """Escribe un valor. Lanza excepción si el store lo rechaza."""

        ...

    def describe(self, node: Any) -> str:
        """Nombre legible del nodo para logs/diagnóstico."""

        ...
