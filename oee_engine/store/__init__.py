from .in_memory_store import InMemoryMetricsStore, InMemoryNode, InMemoryVariable
from .metrics_store import EMPTY_GUID, MetricsStore, NodeId, Reference, ScalarValue
from .resolver import DataSourceResolver, is_empty_reference

__all__ = [
    "DataSourceResolver",
    "EMPTY_GUID",
    "InMemoryMetricsStore",
    "InMemoryNode",
    "InMemoryVariable",
    "MetricsStore",
    "NodeId",
    "Reference",
    "ScalarValue",
    "is_empty_reference",
]
