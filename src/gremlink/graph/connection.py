"""Gremlin connection management with reconnect support.

This module owns the lifecycle of a single graph session: opening it
(optionally IAM-signed), handing out versioned traversal handles, rebuilding
it on demand, and turning abnormal close notifications into errors that
in-flight operations can observe.
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from gremlink.core.errors import ConnectionError, PrematureCloseError, SigningError
from gremlink.graph.driver import (
    ABNORMAL_CLOSURE,
    GRAPHSON_V2,
    GremlinTraversalClient,
)
from gremlink.graph.signing import Credentials, RequestSigner

if TYPE_CHECKING:
    from gremlink.graph.driver import GraphSession, GraphTraversalClient

logger = logging.getLogger(__name__)


def _env(name: str, fallback: str, default: str | None = None) -> str | None:
    return os.getenv(f"GREMLINK_{name}") or os.getenv(fallback) or default


@dataclass
class NeptuneConfig:
    """Configuration for a Gremlin endpoint connection."""

    host: str | None
    port: int = 8182
    use_iam: bool = False
    region: str | None = None
    path: str = "/gremlin"
    mime_type: str = GRAPHSON_V2
    traversal_source: str = "g"

    @property
    def url(self) -> str:
        return f"wss://{self.host}:{self.port}{self.path}"

    @classmethod
    def from_env(cls) -> NeptuneConfig:
        """Create configuration from environment variables.

        Environment variables (with GREMLINK_ prefix or without):
            GREMLINK_NEPTUNE_ENDPOINT or NEPTUNE_ENDPOINT: Database host
            GREMLINK_NEPTUNE_PORT or NEPTUNE_PORT: Database port (default: 8182)
            GREMLINK_USE_IAM or USE_IAM: "true" to sign connections (default: false)
            GREMLINK_AWS_REGION or AWS_DEFAULT_REGION: Signing region
            GREMLINK_GREMLIN_PATH: Endpoint path (default: /gremlin)
            GREMLINK_MIME_TYPE: Serializer media type (default: GraphSON v2)
        """
        return cls(
            host=_env("NEPTUNE_ENDPOINT", "NEPTUNE_ENDPOINT"),
            port=int(_env("NEPTUNE_PORT", "NEPTUNE_PORT", "8182")),
            use_iam=(_env("USE_IAM", "USE_IAM", "false") or "").lower() == "true",
            region=_env("AWS_REGION", "AWS_DEFAULT_REGION"),
            path=_env("GREMLIN_PATH", "GREMLIN_PATH", "/gremlin"),
            mime_type=_env("MIME_TYPE", "GREMLIN_MIME_TYPE", GRAPHSON_V2),
            traversal_source=_env("TRAVERSAL_SOURCE", "GREMLIN_TRAVERSAL_SOURCE", "g"),
        )


class ConnectionState(str, Enum):
    """Lifecycle state of the managed session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass
class SessionHandle:
    """A traversal source bound to one generation of the session.

    ``closed`` resolves when that session closes; it carries a
    PrematureCloseError when the close was abnormal.
    """

    generation: int
    traversal: Any
    closed: Future = field(repr=False)

    def failure(self) -> PrematureCloseError | None:
        """Return the abnormal-close error for this session, if any."""
        if not self.closed.done():
            return None
        error = self.closed.exception()
        return error if isinstance(error, PrematureCloseError) else None


class ConnectionManager:
    """Owns one graph session and rebuilds it on demand.

    Example:
        >>> manager = ConnectionManager(NeptuneConfig.from_env())
        >>> manager.open()
        >>> g = manager.current_handle().traversal
        >>> manager.close()
    """

    def __init__(
        self,
        config: NeptuneConfig | None = None,
        client: GraphTraversalClient | None = None,
        signer: RequestSigner | None = None,
        credentials: Credentials | None = None,
    ) -> None:
        """Initialize connection manager.

        Args:
            config: Endpoint configuration. If None, loads from environment.
            client: Wire client. Defaults to the gremlinpython client.
            signer: Request signer used when IAM auth is enabled.
            credentials: Explicit signing credentials (environment fallback).
        """
        self._config = config or NeptuneConfig.from_env()
        self._client = client or GremlinTraversalClient(self._config.traversal_source)
        self._signer = signer or RequestSigner()
        self._credentials = credentials or Credentials(region=self._config.region)
        self._lock = threading.RLock()
        self._state = ConnectionState.DISCONNECTED
        self._session: GraphSession | None = None
        self._handle: SessionHandle | None = None
        self._generation = 0

    @property
    def config(self) -> NeptuneConfig:
        return self._config

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def generation(self) -> int:
        """Number of sessions opened so far."""
        return self._generation

    def _headers(self) -> dict[str, str]:
        if not self._config.use_iam:
            return {}
        try:
            return self._signer.sign(
                self._config.host,
                self._config.port,
                self._config.path,
                credentials=self._credentials,
            )
        except SigningError as e:
            raise ConnectionError(f"Failed to sign connection request: {e}") from e

    def open(self) -> SessionHandle:
        """Open a new session and make it current.

        Returns:
            Handle bound to the new session.

        Raises:
            ConnectionError: If the host is missing, or signing or the open fails.
        """
        if not self._config.host:
            raise ConnectionError(
                "No endpoint host configured; set NEPTUNE_ENDPOINT or GREMLINK_NEPTUNE_ENDPOINT"
            )

        with self._lock:
            self._state = ConnectionState.CONNECTING
            try:
                headers = self._headers()
                logger.info(f"Opening session to {self._config.url}")
                session = self._client.open(self._config.url, headers, self._config.mime_type)
            except ConnectionError:
                self._state = ConnectionState.DISCONNECTED
                raise
            except Exception as e:
                self._state = ConnectionState.DISCONNECTED
                raise ConnectionError(f"Failed to open {self._config.url}: {e}") from e

            self._generation += 1
            closed: Future = Future()
            session.on_close(self._close_handler(self._generation, closed))
            self._session = session
            self._handle = SessionHandle(self._generation, session.new_traversal_handle(), closed)
            self._state = ConnectionState.CONNECTED
            return self._handle

    def _close_handler(self, generation: int, closed: Future):
        def handle(code: int, message: str) -> None:
            logger.info(f"close - {code} {message}")
            if closed.done():
                return
            if code == ABNORMAL_CLOSURE:
                logger.error(f"Session {generation} closed prematurely")
                closed.set_exception(PrematureCloseError(code, message))
                with self._lock:
                    if self._generation == generation:
                        self._state = ConnectionState.DISCONNECTED
            else:
                closed.set_result((code, message))

        return handle

    def ensure_open(self) -> SessionHandle:
        """Return the current handle, opening a session if there is none."""
        with self._lock:
            if self._state is ConnectionState.CONNECTED and self._handle is not None:
                return self._handle
            # a session that closed abnormally is still held until replaced
            self._close_session()
            return self.open()

    def current_handle(self) -> SessionHandle:
        """Get the handle for the current session.

        Raises:
            ConnectionError: If no session is open.
        """
        with self._lock:
            if self._handle is None or self._state is not ConnectionState.CONNECTED:
                raise ConnectionError("Not connected; call open() first")
            return self._handle

    def poll_closed(self, generation: int) -> None:
        """Have the session of ``generation`` report a close it has observed.

        The driver surfaces a server-side close as an ordinary error; this
        turns it into a close notification before the caller decides whether
        to retry. Sessions already replaced are ignored.
        """
        with self._lock:
            if generation != self._generation or self._session is None:
                return
            session = self._session
        session.poll_closed()

    def reopen(self, stale_generation: int | None = None) -> SessionHandle:
        """Close the current session (best-effort) and open a new one.

        Args:
            stale_generation: Generation the caller saw fail. If a newer
                session already replaced it, that session is returned as is.
        """
        with self._lock:
            if (
                stale_generation is not None
                and stale_generation != self._generation
                and self._state is ConnectionState.CONNECTED
                and self._handle is not None
            ):
                logger.debug(f"Session {stale_generation} already replaced by {self._generation}")
                return self._handle
            logger.warning(f"Reopening session {self._generation}")
            self._close_session()
            return self.open()

    def _close_session(self) -> None:
        session, self._session = self._session, None
        self._handle = None
        self._state = ConnectionState.DISCONNECTED
        if session is None:
            return
        try:
            session.close()
        except Exception as e:
            logger.warning(f"Failed to close session cleanly: {e}")

    def close(self) -> None:
        """Close the session and release resources."""
        with self._lock:
            self._close_session()

    def __enter__(self) -> ConnectionManager:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit with cleanup."""
        self.close()
