"""Graph writer for create-or-update of vertices and edges.

Every write is one retried query:
1. Look the element up by ID
2. Create it when absent (labels and endpoints are only set here)
3. Reconcile its properties to the requested mapping

Deletes are plain drops; deleting a vertex removes its edges first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from gremlin_python.process.traversal import T

from gremlink.core.errors import NonRetryableQueryError
from gremlink.graph.driver import QueryErrorKind
from gremlink.graph.reconciler import PropertyReconciler, ReconcileResult

if TYPE_CHECKING:
    from gremlink.core.models import Edge, Node
    from gremlink.graph.executor import RetryingQueryExecutor

logger = logging.getLogger(__name__)

DEFAULT_LABEL_SEPARATOR = "::"


@dataclass
class SaveResult:
    """Outcome of a save operation."""

    id: str
    created: bool
    properties: ReconcileResult

    @property
    def updated(self) -> bool:
        return not self.created


class GraphWriter:
    """Creates, updates and deletes vertices and edges through the executor."""

    def __init__(
        self,
        executor: RetryingQueryExecutor,
        reconciler: PropertyReconciler | None = None,
        label_separator: str = DEFAULT_LABEL_SEPARATOR,
    ) -> None:
        """Initialize graph writer.

        Args:
            executor: Retrying executor bound to a connection.
            reconciler: Property reconciler (a default one is created).
            label_separator: Joins multiple vertex labels into one label.
        """
        self._executor = executor
        self._reconciler = reconciler or PropertyReconciler()
        self._label_separator = label_separator

    def combined_label(self, labels: list[str]) -> str:
        return self._label_separator.join(labels)

    def save_node(self, node: Node) -> SaveResult:
        """Create or update a vertex.

        Labels are applied only when the vertex is created; the engine does
        not support relabeling.
        """
        logger.info(f"saveNode {node.id}")

        def write(g: Any) -> SaveResult:
            created = not g.V(node.id).has_next()
            if created:
                g.add_v(self.combined_label(node.labels)).property(T.id, node.id).iterate()
                logger.info(f"Created vertex {node.id}")
            else:
                logger.info(f"Vertex {node.id} exists, updating properties")
            props = self._reconciler.reconcile(g, node.id, True, node.properties)
            return SaveResult(id=node.id, created=created, properties=props)

        return self._executor.execute(write)

    def delete_node(self, node_id: str) -> None:
        """Delete a vertex and its edges.

        Incoming edges, outgoing edges and the vertex are dropped in three
        round trips; a failure in between leaves the remaining edges.
        """
        logger.info(f"deleteNode {node_id}")

        def drop(g: Any) -> None:
            g.V(node_id).in_e().drop().iterate()
            g.V(node_id).out_e().drop().iterate()
            g.V(node_id).drop().iterate()

        self._executor.execute(drop)

    def save_edge(self, edge: Edge) -> SaveResult:
        """Create or update an edge.

        Label and endpoints are applied only when the edge is created.
        """
        logger.info(f"saveEdge {edge.id}")

        def write(g: Any) -> SaveResult:
            created = not g.E(edge.id).has_next()
            if created:
                # Stored with the "to" vertex as out-vertex so that the
                # elementMap IN/OUT endpoints read back as from/to.
                added = (
                    g.V(edge.to).as_("a")
                    .V(edge.from_)
                    .add_e(edge.label)
                    .property(T.id, edge.id)
                    .from_("a")
                    .to_list()
                )
                if not added:
                    raise NonRetryableQueryError(
                        f"Cannot create edge {edge.id}: vertex {edge.from_} or {edge.to} not found",
                        kind=QueryErrorKind.OTHER,
                    )
                logger.info(f"Created edge {edge.id} ({edge.from_} -> {edge.to})")
            else:
                logger.info(f"Edge {edge.id} exists, updating properties")
            props = self._reconciler.reconcile(g, edge.id, False, edge.properties)
            return SaveResult(id=edge.id, created=created, properties=props)

        return self._executor.execute(write)

    def delete_edge(self, edge_id: str) -> None:
        """Delete an edge by ID."""
        logger.info(f"deleteEdge {edge_id}")
        self._executor.execute(lambda g: g.E(edge_id).drop().iterate())
