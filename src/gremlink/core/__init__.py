"""Core module containing domain models, errors, and configuration."""

from gremlink.core.errors import (
    ConnectionError,
    GremlinkError,
    MissingCredentials,
    MissingEndpoint,
    NonRetryableQueryError,
    PrematureCloseError,
    QueryError,
    RetryExhausted,
    SigningError,
    TransientQueryError,
)
from gremlink.core.models import (
    DanglingEdge,
    Edge,
    Focus,
    Node,
    SearchOptions,
    Subgraph,
)

__all__ = [
    "ConnectionError",
    "DanglingEdge",
    "Edge",
    "Focus",
    "GremlinkError",
    "MissingCredentials",
    "MissingEndpoint",
    "Node",
    "NonRetryableQueryError",
    "PrematureCloseError",
    "QueryError",
    "RetryExhausted",
    "SearchOptions",
    "SigningError",
    "Subgraph",
    "TransientQueryError",
]
