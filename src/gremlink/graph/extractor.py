"""Subgraph search and extraction.

Raw traversal output is turned into Node/Edge models:
- Vertices come from ``valueMap(true)``: token keys plus list-valued properties
- Edges come from ``elementMap()``: token keys, IN/OUT endpoint maps, properties

Edges whose endpoints are not among the extracted nodes are dropped.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from gremlin_python.process.graph_traversal import __

from gremlink.core.models import DanglingEdge, Edge, Node, SearchOptions, Subgraph

if TYPE_CHECKING:
    from gremlink.graph.executor import RetryingQueryExecutor

logger = logging.getLogger(__name__)


def _key_name(key: Any) -> str:
    """Name of a map key; T.id/T.label/Direction.IN arrive as enums."""
    if isinstance(key, Enum):
        return key.name
    return str(key)


def _endpoint_id(value: Any) -> Any:
    if isinstance(value, dict):
        for key, inner in value.items():
            if _key_name(key) == "id":
                return inner
        return None
    return value


def _unwrap(value: Any) -> Any:
    if isinstance(value, list) and len(value) == 1:
        return value[0]
    return value


def extract_node(raw: dict) -> Node:
    """Build a Node from one ``valueMap(true)`` row."""
    node_id: Any = None
    labels: list[str] = []
    properties: dict[str, Any] = {}

    for key, value in raw.items():
        name = _key_name(key)
        if name == "id":
            node_id = value
        elif name == "label":
            labels = list(value) if isinstance(value, (list, tuple)) else [value]
        else:
            properties[name] = _unwrap(value)

    return Node(id=str(node_id), labels=labels, properties=properties)


def extract_edge(raw: dict) -> Edge:
    """Build an Edge from one ``elementMap()`` row.

    The IN endpoint is reported as ``from`` and the OUT endpoint as ``to``.
    """
    fields: dict[str, Any] = {"id": "", "label": "", "from": "", "to": ""}
    properties: dict[str, Any] = {}

    for key, value in raw.items():
        name = _key_name(key)
        if name in ("id", "label"):
            fields[name] = value
        elif name == "IN":
            fields["from"] = _endpoint_id(value)
        elif name == "OUT":
            fields["to"] = _endpoint_id(value)
        else:
            properties[name] = value

    return Edge(
        id=str(fields["id"]),
        label=str(fields["label"]),
        to=str(fields["to"]),
        properties=properties,
        **{"from": str(fields["from"])},
    )


def extract_subgraph(
    raw_nodes: list[dict], raw_edges: list[dict]
) -> tuple[Subgraph, list[DanglingEdge]]:
    """Extract nodes and edges, keeping only edges with both endpoints present.

    Returns:
        The consistent subgraph and the edges that were left out.
    """
    nodes = [extract_node(raw) for raw in raw_nodes]
    node_ids = {node.id for node in nodes}

    edges: list[Edge] = []
    dangling: list[DanglingEdge] = []
    for raw in raw_edges:
        edge = extract_edge(raw)
        missing = [end for end in (edge.from_, edge.to) if end not in node_ids]
        if missing:
            dangling.append(
                DanglingEdge(edge_id=edge.id, from_id=edge.from_, to_id=edge.to, missing=missing)
            )
            continue
        edges.append(edge)

    return Subgraph(nodes=nodes, edges=edges), dangling


class GraphExtractor:
    """Runs subgraph searches and converts the results."""

    def __init__(self, executor: RetryingQueryExecutor) -> None:
        self._executor = executor

    def fetch(self, g: Any, options: SearchOptions) -> tuple[list[dict], list[dict]]:
        """Fetch raw vertex and edge maps for a search."""
        if options.focus is not None:
            focus = options.focus
            logger.info(f"Focus search on {focus.label}.{focus.key}={focus.value!r}")
            raw_nodes = (
                g.V()
                .has(focus.label, focus.key, focus.value)
                .union(__.identity(), __.both_e().both_v())
                .dedup()
                .value_map(True)
                .to_list()
            )
        else:
            raw_nodes = g.V().value_map(True).to_list()
        raw_edges = g.E().element_map().to_list()
        logger.debug(f"rawNodes {raw_nodes}")
        logger.debug(f"rawEdges {raw_edges}")
        return raw_nodes, raw_edges

    def search(self, options: SearchOptions | None = None) -> Subgraph:
        """Return nodes and edges; an empty options object returns everything.

        With ``options.focus`` the result is the focal vertex, its direct
        neighbours, and the edges among them.
        """
        options = options or SearchOptions()
        raw_nodes, raw_edges = self._executor.execute(lambda g: self.fetch(g, options))

        subgraph, dangling = extract_subgraph(raw_nodes, raw_edges)
        for item in dangling:
            logger.debug(
                f"Dropping edge {item.edge_id}: node(s) {', '.join(item.missing)} "
                "not in search results"
            )
        logger.info(f"search returned {len(subgraph.nodes)} nodes, {len(subgraph.edges)} edges")
        return subgraph
