"""Gremlin wire client boundary.

Defines the session/client contracts the connection manager depends on, the
gremlinpython-backed implementation of them, and the classifier that turns
driver failures into structured error kinds.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Protocol

from gremlin_python.driver.driver_remote_connection import DriverRemoteConnection
from gremlin_python.driver.serializer import (
    GraphBinarySerializersV1,
    GraphSONSerializersV2d0,
    GraphSONSerializersV3d0,
)
from gremlin_python.process.anonymous_traversal import traversal

logger = logging.getLogger(__name__)

GRAPHSON_V2 = "application/vnd.gremlin-v2.0+json"
GRAPHSON_V3 = "application/vnd.gremlin-v3.0+json"
GRAPHBINARY_V1 = "application/vnd.graphbinary-v1.0"

_SERIALIZERS = {
    GRAPHSON_V2: GraphSONSerializersV2d0,
    GRAPHSON_V3: GraphSONSerializersV3d0,
    GRAPHBINARY_V1: GraphBinarySerializersV1,
}

# WebSocket close code for a connection dropped without a close frame
ABNORMAL_CLOSURE = 1006
NORMAL_CLOSURE = 1000

CloseHandler = Callable[[int, str], None]


class QueryErrorKind(str, Enum):
    """Categories of traversal failure, in classification priority order."""

    SOCKET_CLOSED = "socket_closed"
    CONCURRENT_MODIFICATION = "concurrent_modification"
    READ_ONLY_VIOLATION = "read_only_violation"
    OTHER = "other"


_SOCKET_CLOSED_MARKERS = (
    "websocket is not open",
    "connection was closed",
    "connection was already closed",
    "cannot write to closing transport",
    "server disconnected",
)


def classify_error(error: BaseException) -> QueryErrorKind:
    """Map a driver or server failure to a QueryErrorKind.

    The server reports most failures as a status code plus a Java exception
    name in the message, so classification looks at the message text here and
    nowhere else.
    """
    if isinstance(error, (ConnectionResetError, ConnectionAbortedError, BrokenPipeError)):
        return QueryErrorKind.SOCKET_CLOSED

    message = str(error)
    lowered = message.lower()
    if any(marker in lowered for marker in _SOCKET_CLOSED_MARKERS):
        return QueryErrorKind.SOCKET_CLOSED
    if "ConcurrentModificationException" in message:
        return QueryErrorKind.CONCURRENT_MODIFICATION
    if "ReadOnlyViolationException" in message:
        return QueryErrorKind.READ_ONLY_VIOLATION
    return QueryErrorKind.OTHER


class GraphSession(Protocol):
    """A live session against the remote graph engine."""

    def close(self) -> None: ...

    def on_close(self, handler: CloseHandler) -> None: ...

    def new_traversal_handle(self) -> Any: ...

    def poll_closed(self) -> None: ...


class GraphTraversalClient(Protocol):
    """Opens sessions against a Gremlin endpoint."""

    def open(self, url: str, headers: dict[str, str], mime_type: str) -> GraphSession: ...


class GremlinSession:
    """GraphSession backed by a gremlinpython DriverRemoteConnection."""

    def __init__(self, remote: DriverRemoteConnection) -> None:
        self._remote = remote
        self._handlers: list[CloseHandler] = []
        self._closed = False

    def on_close(self, handler: CloseHandler) -> None:
        self._handlers.append(handler)

    def new_traversal_handle(self) -> Any:
        return traversal().with_remote(self._remote)

    def notify_closed(self, code: int, message: str = "") -> None:
        """Deliver a close notification to every registered handler once."""
        if self._closed:
            return
        self._closed = True
        logger.info(f"Session closed - {code} {message}")
        for handler in list(self._handlers):
            handler(code, message)

    def poll_closed(self) -> None:
        """Deliver a close that the transport recorded but the driver only raised.

        gremlinpython reports a server-side close as a plain RuntimeError; the
        close code is kept on the pooled connection's websocket.
        """
        code = self._transport_close_code()
        if code is not None:
            self.notify_closed(code, "closed by server")

    def _transport_close_code(self) -> int | None:
        client = getattr(self._remote, "_client", None)
        pool = getattr(client, "_pool", None)
        for connection in list(getattr(pool, "queue", None) or ()):
            transport = getattr(connection, "_transport", None)
            code = getattr(getattr(transport, "_websocket", None), "close_code", None)
            if isinstance(code, int):
                return code
        return None

    def close(self) -> None:
        try:
            self._remote.close()
        finally:
            self.notify_closed(NORMAL_CLOSURE, "closed by client")


class GremlinTraversalClient:
    """GraphTraversalClient that connects with gremlinpython."""

    def __init__(self, traversal_source: str = "g", **transport_kwargs: Any) -> None:
        self._traversal_source = traversal_source
        self._transport_kwargs = transport_kwargs

    def open(self, url: str, headers: dict[str, str], mime_type: str) -> GremlinSession:
        serializer_cls = _SERIALIZERS.get(mime_type)
        if serializer_cls is None:
            raise ValueError(
                f"Unsupported mime type: {mime_type!r}. Supported: {sorted(_SERIALIZERS)}"
            )
        remote = DriverRemoteConnection(
            url,
            self._traversal_source,
            headers=headers or None,
            message_serializer=serializer_cls(),
            **self._transport_kwargs,
        )
        return GremlinSession(remote)
