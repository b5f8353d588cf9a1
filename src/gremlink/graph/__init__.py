"""Graph module for Gremlin endpoint interactions."""

from gremlink.graph.connection import (
    ConnectionManager,
    ConnectionState,
    NeptuneConfig,
    SessionHandle,
)
from gremlink.graph.driver import (
    GraphSession,
    GraphTraversalClient,
    GremlinSession,
    GremlinTraversalClient,
    QueryErrorKind,
    classify_error,
)
from gremlink.graph.executor import (
    QueryRetryPolicy,
    RetryingQueryExecutor,
)
from gremlink.graph.extractor import (
    GraphExtractor,
    extract_edge,
    extract_node,
    extract_subgraph,
)
from gremlink.graph.reconciler import (
    PropertyReconciler,
    ReconcileResult,
)
from gremlink.graph.signing import (
    Credentials,
    RequestSigner,
)
from gremlink.graph.writer import (
    GraphWriter,
    SaveResult,
)

__all__ = [
    "ConnectionManager",
    "ConnectionState",
    "NeptuneConfig",
    "SessionHandle",
    "GraphSession",
    "GraphTraversalClient",
    "GremlinSession",
    "GremlinTraversalClient",
    "QueryErrorKind",
    "classify_error",
    "QueryRetryPolicy",
    "RetryingQueryExecutor",
    "GraphExtractor",
    "extract_edge",
    "extract_node",
    "extract_subgraph",
    "PropertyReconciler",
    "ReconcileResult",
    "Credentials",
    "RequestSigner",
    "GraphWriter",
    "SaveResult",
]
