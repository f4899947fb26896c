from __future__ import annotations

import logging
from typing import Any

from oee_engine.errors import ResolutionError

from .metrics_store import EMPTY_GUID, MetricsStore, NodeId, Reference

logger = logging.getLogger(__name__)


def is_empty_reference(reference: Any) -> bool:
    if reference is None:
        return True
    if isinstance(reference, NodeId):
        return reference.is_empty
    text = str(reference).strip()
    return not text or text == EMPTY_GUID


class DataSourceResolver:
    """Resuelve una referencia de data source a un metrics root.

    Estrategias, en orden:
    1. Por identificador (NodeId o string)
    2. Por path (solo referencias string)

    Si una estrategia lanza excepción se loggea y se prueba la siguiente.
    """

    def __init__(self, store: MetricsStore) -> None:
        self._store = store

    def resolve(self, reference: Reference) -> Any:
        if is_empty_reference(reference):
            raise ResolutionError(reference, "reference is empty")

        root = self._try("identifier", self._store.resolve_identifier, reference)
        if root is None and not isinstance(reference, NodeId):
            root = self._try("path", self._store.resolve_path, str(reference).strip())

        if root is None:
            raise ResolutionError(reference, "no node matches by identifier or path")

        logger.debug("[RESOLVER] %r -> %s", reference, self._store.describe(root))
        return root

    def _try(self, strategy: str, fn, reference):
        try:
            return fn(reference)
        except Exception as e:
            logger.warning("[RESOLVER] %s lookup failed for %r: %s", strategy, reference, e)
            return None
