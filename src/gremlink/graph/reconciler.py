"""Property reconciliation for vertices and edges.

Converges an element's stored properties to a desired mapping: keys no
longer wanted are dropped, every desired key is written. Vertex properties
are written with single cardinality so a key always holds exactly one value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from gremlin_python.process.traversal import Cardinality

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Keys touched by a reconcile pass."""

    element_id: str
    removed: list[str] = field(default_factory=list)
    written: list[str] = field(default_factory=list)


class PropertyReconciler:
    """Diffs and writes element properties one key per round trip.

    Writes are not batched into a single traversal; a failure part way
    through leaves whatever the engine already committed.
    """

    def _element(self, g: Any, element_id: str, is_vertex: bool) -> Any:
        return g.V(element_id) if is_vertex else g.E(element_id)

    def current_properties(self, g: Any, element_id: str, is_vertex: bool = True) -> dict:
        rows = self._element(g, element_id, is_vertex).value_map().to_list()
        return rows[0] if rows else {}

    def reconcile(
        self,
        g: Any,
        element_id: str,
        is_vertex: bool,
        desired: dict[str, Any],
    ) -> ReconcileResult:
        """Make the element's property set exactly ``desired``.

        Args:
            g: Traversal source of the active session.
            element_id: Vertex or edge identifier.
            is_vertex: True for a vertex, False for an edge.
            desired: Target property mapping.

        Returns:
            ReconcileResult listing removed and written keys.
        """
        result = ReconcileResult(element_id=element_id)

        existing = self.current_properties(g, element_id, is_vertex)
        logger.debug(f"Existing properties of {element_id}: {existing}")

        for key in existing:
            if key not in desired:
                logger.debug(f"Removing property {key} from {element_id}")
                self._element(g, element_id, is_vertex).properties(key).drop().iterate()
                result.removed.append(key)

        for key, value in desired.items():
            logger.debug(f"Saving property {key} on {element_id}")
            if is_vertex:
                self._element(g, element_id, True).property(
                    Cardinality.single, key, value
                ).iterate()
            else:
                self._element(g, element_id, False).property(key, value).iterate()
            result.written.append(key)

        return result
