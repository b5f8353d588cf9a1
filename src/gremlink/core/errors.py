"""Exception hierarchy for gremlink.

All errors raised by the library derive from GremlinkError so callers can
catch library failures without catching driver internals.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gremlink.graph.driver import QueryErrorKind


class GremlinkError(Exception):
    """Base class for all gremlink errors."""

    pass


class ConnectionError(GremlinkError):
    """Raised when opening or reopening the graph session fails."""

    pass


class PrematureCloseError(ConnectionError):
    """Raised when the remote closed the active session abnormally."""

    def __init__(self, code: int, reason: str = "") -> None:
        self.code = code
        self.reason = reason
        super().__init__(f"Connection closed prematurely ({code} {reason})".rstrip())


class SigningError(GremlinkError):
    """Raised when request signing headers cannot be produced."""

    pass


class MissingCredentials(SigningError):
    """Access key or secret key could not be resolved."""

    pass


class MissingEndpoint(SigningError):
    """Host or port was not supplied."""

    pass


class QueryError(GremlinkError):
    """Base class for traversal execution failures."""

    def __init__(self, message: str, kind: QueryErrorKind | None = None) -> None:
        self.kind = kind
        super().__init__(message)


class TransientQueryError(QueryError):
    """A failure of a kind the executor knows how to retry."""

    pass


class NonRetryableQueryError(QueryError):
    """A failure the executor does not retry."""

    pass


class RetryExhausted(QueryError):
    """Raised when every attempt failed with a transient error."""

    def __init__(self, attempts: int, last_error: TransientQueryError) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Query failed after {attempts} attempts: {last_error}",
            kind=last_error.kind,
        )
