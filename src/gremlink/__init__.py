"""gremlink - retrying Gremlin client with idempotent upserts and subgraph search."""

from gremlink.client import GremlinkClient
from gremlink.core import (
    Edge,
    Focus,
    GremlinkError,
    Node,
    RetryExhausted,
    SearchOptions,
    Subgraph,
)
from gremlink.graph import NeptuneConfig, QueryRetryPolicy

__version__ = "0.1.0"

__all__ = [
    "Edge",
    "Focus",
    "GremlinkClient",
    "GremlinkError",
    "NeptuneConfig",
    "Node",
    "QueryRetryPolicy",
    "RetryExhausted",
    "SearchOptions",
    "Subgraph",
    "__version__",
]
