"""Unit tests for the Gremlin wire client boundary."""

import queue
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from gremlink.core.errors import PrematureCloseError
from gremlink.graph.connection import ConnectionManager, NeptuneConfig
from gremlink.graph.executor import RetryingQueryExecutor

from gremlink.graph.driver import (
    ABNORMAL_CLOSURE,
    GRAPHBINARY_V1,
    GRAPHSON_V2,
    GremlinSession,
    GremlinTraversalClient,
    QueryErrorKind,
    classify_error,
)


class TestClassifyError:
    """Tests for structured error classification."""

    @pytest.mark.parametrize(
        "message",
        [
            "WebSocket is not open: readyState 3 (CLOSED)",
            "Connection was closed by server.",
            "Connection was already closed.",
            "Cannot write to closing transport",
        ],
    )
    def test_socket_closed_messages(self, message: str) -> None:
        assert classify_error(RuntimeError(message)) is QueryErrorKind.SOCKET_CLOSED

    def test_socket_errors_by_type(self) -> None:
        assert classify_error(ConnectionResetError()) is QueryErrorKind.SOCKET_CLOSED
        assert classify_error(BrokenPipeError()) is QueryErrorKind.SOCKET_CLOSED

    def test_concurrent_modification(self) -> None:
        error = Exception(
            '500: {"code":"ConcurrentModificationException",'
            '"detailedMessage":"Failed to complete operation due to conflicting concurrent operations."}'
        )
        assert classify_error(error) is QueryErrorKind.CONCURRENT_MODIFICATION

    def test_read_only_violation(self) -> None:
        error = Exception('500: {"code":"ReadOnlyViolationException"}')
        assert classify_error(error) is QueryErrorKind.READ_ONLY_VIOLATION

    def test_socket_closed_takes_priority(self) -> None:
        error = Exception("WebSocket is not open after ConcurrentModificationException")
        assert classify_error(error) is QueryErrorKind.SOCKET_CLOSED

    def test_other(self) -> None:
        error = Exception('597: {"code":"MalformedQueryException"}')
        assert classify_error(error) is QueryErrorKind.OTHER
        assert classify_error(ValueError("bad input")) is QueryErrorKind.OTHER


class TestGremlinSession:
    """Tests for GremlinSession."""

    def test_close_notifies_handlers_once(self) -> None:
        remote = MagicMock()
        session = GremlinSession(remote)
        handler = MagicMock()
        session.on_close(handler)

        session.close()
        session.close()

        assert remote.close.call_count == 2
        handler.assert_called_once_with(1000, "closed by client")

    def test_notify_abnormal_close(self) -> None:
        session = GremlinSession(MagicMock())
        handler = MagicMock()
        session.on_close(handler)

        session.notify_closed(ABNORMAL_CLOSURE, "going away")

        handler.assert_called_once_with(ABNORMAL_CLOSURE, "going away")

    def test_close_notifies_even_if_remote_close_fails(self) -> None:
        remote = MagicMock()
        remote.close.side_effect = RuntimeError("boom")
        session = GremlinSession(remote)
        handler = MagicMock()
        session.on_close(handler)

        with pytest.raises(RuntimeError):
            session.close()
        handler.assert_called_once()

    @patch("gremlink.graph.driver.traversal")
    def test_new_traversal_handle(self, mock_traversal: MagicMock) -> None:
        remote = MagicMock()
        session = GremlinSession(remote)

        handle = session.new_traversal_handle()

        mock_traversal.return_value.with_remote.assert_called_once_with(remote)
        assert handle is mock_traversal.return_value.with_remote.return_value


class TestGremlinTraversalClient:
    """Tests for GremlinTraversalClient.open."""

    @patch("gremlink.graph.driver.DriverRemoteConnection")
    def test_open_graphson_v2(self, mock_drc: MagicMock) -> None:
        client = GremlinTraversalClient()
        session = client.open("wss://db:8182/gremlin", {"Authorization": "x"}, GRAPHSON_V2)

        assert isinstance(session, GremlinSession)
        args, kwargs = mock_drc.call_args
        assert args == ("wss://db:8182/gremlin", "g")
        assert kwargs["headers"] == {"Authorization": "x"}
        assert type(kwargs["message_serializer"]).__name__ == "GraphSONSerializersV2d0"

    @patch("gremlink.graph.driver.DriverRemoteConnection")
    def test_open_without_headers(self, mock_drc: MagicMock) -> None:
        GremlinTraversalClient(traversal_source="g2").open("wss://db:8182/gremlin", {}, GRAPHBINARY_V1)

        args, kwargs = mock_drc.call_args
        assert args[1] == "g2"
        assert kwargs["headers"] is None
        assert type(kwargs["message_serializer"]).__name__ == "GraphBinarySerializersV1"

    def test_open_unknown_mime_type(self) -> None:
        with pytest.raises(ValueError, match="Unsupported mime type"):
            GremlinTraversalClient().open("wss://db:8182/gremlin", {}, "text/plain")


def _pooled_remote(close_code: int | None) -> SimpleNamespace:
    """Remote shaped like DriverRemoteConnection: client -> pool -> connection -> websocket."""
    pool: queue.Queue = queue.Queue()
    websocket = SimpleNamespace(close_code=close_code)
    pool.put(SimpleNamespace(_transport=SimpleNamespace(_websocket=websocket)))
    return SimpleNamespace(_client=SimpleNamespace(_pool=pool), close=MagicMock())


class TestServerClose:
    """Close codes recorded by the gremlinpython transport."""

    def test_poll_reports_recorded_code(self) -> None:
        session = GremlinSession(_pooled_remote(ABNORMAL_CLOSURE))
        handler = MagicMock()
        session.on_close(handler)

        session.poll_closed()
        session.close()

        handler.assert_called_once_with(ABNORMAL_CLOSURE, "closed by server")

    def test_poll_without_close_code(self) -> None:
        session = GremlinSession(_pooled_remote(None))
        handler = MagicMock()
        session.on_close(handler)

        session.poll_closed()

        handler.assert_not_called()

    def test_poll_tolerates_unknown_remote(self) -> None:
        session = GremlinSession(MagicMock())
        handler = MagicMock()
        session.on_close(handler)

        session.poll_closed()

        handler.assert_not_called()

    @patch("gremlink.graph.driver.traversal")
    @patch("gremlink.graph.driver.DriverRemoteConnection")
    def test_server_close_fails_operation(self, mock_drc: MagicMock, mock_traversal: MagicMock) -> None:
        mock_drc.return_value = _pooled_remote(ABNORMAL_CLOSURE)
        manager = ConnectionManager(
            NeptuneConfig(host="db.example.com"), client=GremlinTraversalClient()
        )
        executor = RetryingQueryExecutor(manager, sleep=MagicMock())

        def dropped(g):
            raise RuntimeError("Connection was closed by server.")

        with pytest.raises(PrematureCloseError) as exc_info:
            executor.execute(dropped)

        assert exc_info.value.code == ABNORMAL_CLOSURE
        assert mock_drc.call_count == 1
