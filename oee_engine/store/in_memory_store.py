from __future__ import annotations

import json
import logging
import threading
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from oee_engine.errors import WriteError

from .metrics_store import MetricsStore, NodeId, Reference, ScalarValue
from .paths import ALL_PATHS

logger = logging.getLogger(__name__)


class InMemoryVariable:
    """Handle de un valor dentro del árbol en memoria."""

    __slots__ = ("path", "value")

    def __init__(self, path: str, value: ScalarValue = None) -> None:
        self.path = path
        self.value = value

    def __repr__(self) -> str:
        return f"InMemoryVariable({self.path!r}, {self.value!r})"


class InMemoryNode:
    __slots__ = ("name", "path", "identifier", "children")

    def __init__(self, name: str, path: str, identifier: Optional[str] = None) -> None:
        self.name = name
        self.path = path
        self.identifier = identifier
        self.children: Dict[str, Union["InMemoryNode", InMemoryVariable]] = {}

    def __repr__(self) -> str:
        return f"InMemoryNode({self.path!r})"


class InMemoryMetricsStore(MetricsStore):
    """Implementación sencilla en memoria del MetricsStore.

    - Árbol de nodos con identificador opcional por nodo.
    - Contador de escrituras por path completo (útil en tests).
    - ``fail_writes`` simula outputs que el store rechaza.

    Un lock protege el árbol porque la API HTTP y el worker pueden
    tocarlo a la vez.
    """

    def __init__(self) -> None:
        self._root = InMemoryNode("", "")
        self._by_identifier: Dict[str, InMemoryNode] = {}
        self._failing: set[str] = set()
        self._lock = threading.Lock()
        self.write_counts: Counter[str] = Counter()

    # ------------------------------------------------------------------
    # Construcción del árbol
    # ------------------------------------------------------------------

    def add_node(
        self,
        path: str,
        tree: Optional[Mapping[str, Any]] = None,
        identifier: Optional[str] = None,
    ) -> InMemoryNode:
        """Crea (o reutiliza) el nodo ``path`` y carga ``tree`` debajo.

        ``tree`` es un dict anidado: dicts -> nodos, el resto -> valores.
        Las claves pueden contener "/" ("Inputs/Data/GoodPartCount": 10).
        """

        with self._lock:
            node = self._ensure_node(self._root, _split(path))
            if identifier:
                node.identifier = identifier
                self._by_identifier[identifier] = node
            if tree:
                self._load(node, tree)
            return node

    def add_metrics_root(
        self,
        path: str,
        values: Optional[Mapping[str, Any]] = None,
        identifier: Optional[str] = None,
    ) -> InMemoryNode:
        """Crea un metrics root con el layout estándar completo (valores None)."""

        node = self.add_node(path, {p: None for p in ALL_PATHS}, identifier)
        if values:
            self.add_node(path, values)
        return node

    def load_document(self, document: Iterable[Mapping[str, Any]]) -> list[InMemoryNode]:
        """Carga una lista de roots: ``[{"path", "identifier"?, "tree"?, "standard_layout"?}]``."""

        nodes = []
        for entry in document:
            path = entry["path"]
            identifier = entry.get("identifier")
            tree = entry.get("tree") or {}
            if entry.get("standard_layout", True):
                nodes.append(self.add_metrics_root(path, tree, identifier))
            else:
                nodes.append(self.add_node(path, tree, identifier))
        return nodes

    @classmethod
    def from_json_file(cls, file_path: Union[str, Path]) -> "InMemoryMetricsStore":
        store = cls()
        with open(file_path, "r", encoding="utf-8") as f:
            document = json.load(f)
        if isinstance(document, Mapping):
            document = [document]
        store.load_document(document)
        return store

    def _load(self, node: InMemoryNode, tree: Mapping[str, Any]) -> None:
        for key, value in tree.items():
            parts = _split(key)
            if not parts:
                continue
            parent = self._ensure_node(node, parts[:-1])
            leaf = parts[-1]
            if isinstance(value, Mapping):
                self._load(self._ensure_node(parent, [leaf]), value)
                continue
            existing = parent.children.get(leaf)
            if isinstance(existing, InMemoryVariable):
                existing.value = value
            else:
                parent.children[leaf] = InMemoryVariable(_join(parent.path, leaf), value)

    def _ensure_node(self, start: InMemoryNode, parts: list[str]) -> InMemoryNode:
        node = start
        for part in parts:
            child = node.children.get(part)
            if not isinstance(child, InMemoryNode):
                child = InMemoryNode(part, _join(node.path, part))
                node.children[part] = child
            node = child
        return node

    # ------------------------------------------------------------------
    # MetricsStore
    # ------------------------------------------------------------------

    def resolve_identifier(self, reference: Reference) -> Optional[InMemoryNode]:  # type: ignore[override]
        key = reference.identifier if isinstance(reference, NodeId) else str(reference).strip()
        with self._lock:
            return self._by_identifier.get(key)

    def resolve_path(self, reference: str) -> Optional[InMemoryNode]:  # type: ignore[override]
        with self._lock:
            found = self._walk(self._root, _split(str(reference)))
        return found if isinstance(found, InMemoryNode) else None

    def get(self, root: InMemoryNode, path: str) -> Optional[InMemoryVariable]:  # type: ignore[override]
        with self._lock:
            found = self._walk(root, _split(path))
        return found if isinstance(found, InMemoryVariable) else None

    def read(self, handle: InMemoryVariable) -> ScalarValue:  # type: ignore[override]
        with self._lock:
            return handle.value

    def write(self, handle: InMemoryVariable, value: ScalarValue) -> None:  # type: ignore[override]
        with self._lock:
            if handle.path in self._failing:
                raise WriteError(handle.path, "rejected by store")
            handle.value = value
            self.write_counts[handle.path] += 1

    def describe(self, node: Any) -> str:  # type: ignore[override]
        if isinstance(node, InMemoryNode):
            if node.identifier:
                return f"{node.path} ({node.identifier})"
            return node.path
        return repr(node)

    # ------------------------------------------------------------------
    # Helpers de test / diagnóstico
    # ------------------------------------------------------------------

    def value(self, root: InMemoryNode, path: str) -> ScalarValue:
        handle = self.get(root, path)
        if handle is None:
            raise KeyError(path)
        return self.read(handle)

    def set_value(self, root: InMemoryNode, path: str, value: ScalarValue) -> None:
        """Escritura "externa" (PLC/operador); no cuenta en write_counts."""

        handle = self.get(root, path)
        if handle is None:
            raise KeyError(path)
        with self._lock:
            handle.value = value

    def fail_writes(self, full_path: str, failing: bool = True) -> None:
        with self._lock:
            if failing:
                self._failing.add(full_path)
            else:
                self._failing.discard(full_path)

    def writes_under(self, root: InMemoryNode) -> int:
        prefix = root.path + "/"
        with self._lock:
            return sum(n for p, n in self.write_counts.items() if p.startswith(prefix))

    def snapshot(self, root: InMemoryNode) -> dict:
        """Dict anidado con los valores actuales bajo ``root``."""

        with self._lock:
            return _to_dict(root)

    def _walk(self, start: InMemoryNode, parts: list[str]):
        node: Any = start
        for part in parts:
            if not isinstance(node, InMemoryNode):
                return None
            node = node.children.get(part)
            if node is None:
                return None
        return node


def _split(path: str) -> list[str]:
    return [p for p in path.strip().split("/") if p]


def _join(parent: str, name: str) -> str:
    return f"{parent}/{name}" if parent else name


def _to_dict(node: InMemoryNode) -> dict:
    out: dict = {}
    for name, child in node.children.items():
        out[name] = _to_dict(child) if isinstance(child, InMemoryNode) else child.value
    return out
