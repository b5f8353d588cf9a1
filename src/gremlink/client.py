"""Public client interface for gremlink.

gremlink already exposes lower-level building blocks (graph/ and core/).
This module provides a stable, ergonomic entrypoint for external callers.

Example:
    >>> with GremlinkClient(NeptuneConfig.from_env()) as client:
    ...     client.connect()
    ...     client.save_node(Node(id="v1", labels=["person"], properties={"name": "Eric"}))
    ...     client.query(lambda g: g.V().has("person", "name", "Eric").count().next())
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from gremlink.core.config import GremlinkConfig, get_config
from gremlink.core.models import SearchOptions
from gremlink.graph.connection import ConnectionManager, NeptuneConfig
from gremlink.graph.executor import QueryRetryPolicy, RetryingQueryExecutor
from gremlink.graph.extractor import GraphExtractor
from gremlink.graph.writer import GraphWriter, SaveResult

if TYPE_CHECKING:
    from types import TracebackType

    from gremlink.core.models import Edge, Node, Subgraph
    from gremlink.graph.driver import GraphTraversalClient
    from gremlink.graph.executor import QueryFn, T
    from gremlink.graph.signing import Credentials


class GremlinkClient:
    """High-level client that owns one graph session and exposes its operations."""

    def __init__(
        self,
        config: NeptuneConfig | None = None,
        *,
        settings: GremlinkConfig | None = None,
        traversal_client: GraphTraversalClient | None = None,
        credentials: Credentials | None = None,
        policy: QueryRetryPolicy | None = None,
        manager: ConnectionManager | None = None,
    ) -> None:
        """Create a client.

        Args:
            config: Endpoint configuration (only used when `manager` is not provided).
            settings: Library settings. Defaults to the cached global settings.
            traversal_client: Wire client override, mainly for tests.
            credentials: Explicit IAM signing credentials.
            policy: Retry policy. Defaults to the one derived from settings.
            manager: Optional pre-built connection manager (ownership stays with caller).
        """
        self._settings = settings or get_config()
        self._owns_manager = manager is None
        self._manager = manager or ConnectionManager(
            config, client=traversal_client, credentials=credentials
        )
        self._executor = RetryingQueryExecutor(
            self._manager, policy or QueryRetryPolicy.from_config(self._settings)
        )
        self._writer = GraphWriter(self._executor, label_separator=self._settings.label_separator)
        self._extractor = GraphExtractor(self._executor)

    @property
    def manager(self) -> ConnectionManager:
        """Access the underlying connection manager."""
        return self._manager

    @property
    def executor(self) -> RetryingQueryExecutor:
        return self._executor

    def connect(self) -> None:
        """Open the session to the endpoint (no-op when already connected)."""
        self._manager.ensure_open()

    def query(self, fn: QueryFn[T]) -> T:
        """Run a custom traversal ``fn(g)`` with retries.

        For simple use cases, use ``save_node``, ``save_edge``, etc.
        """
        return self._executor.execute(fn)

    def save_node(self, node: Node) -> SaveResult:
        return self._writer.save_node(node)

    def delete_node(self, node_id: str) -> None:
        self._writer.delete_node(node_id)

    def save_edge(self, edge: Edge) -> SaveResult:
        return self._writer.save_edge(edge)

    def delete_edge(self, edge_id: str) -> None:
        self._writer.delete_edge(edge_id)

    def search(self, options: SearchOptions | dict[str, Any] | None = None) -> Subgraph:
        """Search the graph; see GraphExtractor.search."""
        if isinstance(options, dict):
            options = SearchOptions.model_validate(options)
        return self._extractor.search(options)

    def close(self) -> None:
        """Close resources owned by this client."""
        if self._owns_manager:
            self._manager.close()

    def __enter__(self) -> GremlinkClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
