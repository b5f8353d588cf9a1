"""Domain models for property-graph elements.

Nodes and edges are plain transfer objects: they are built fresh from every
search and supplied by the caller on every write. The remote engine is the
only source of truth.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Node(BaseModel):
    """A vertex.

    Labels are fixed once the vertex exists; only properties are updated on
    later saves.
    """

    id: str = Field(..., min_length=1, description="Unique vertex identifier")
    labels: list[str] = Field(..., min_length=1, description="Ordered vertex labels")
    properties: dict[str, Any] = Field(default_factory=dict)


class Edge(BaseModel):
    """A directed, labeled relationship between two vertices.

    ``from`` is a Python keyword, so the attribute is ``from_`` and the
    serialized name is ``from``.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Unique edge identifier")
    label: str = Field(..., min_length=1)
    from_: str = Field(..., alias="from", description="Source vertex ID")
    to: str = Field(..., description="Target vertex ID")
    properties: dict[str, Any] = Field(default_factory=dict)


class Subgraph(BaseModel):
    """Search result. Every edge has both endpoints among ``nodes``."""

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}


class Focus(BaseModel):
    """Anchor vertex of a focus search: ``has(label, key, value)``."""

    label: str
    key: str
    value: Any


class SearchOptions(BaseModel):
    """Options for ``search``. An empty instance returns the whole graph."""

    focus: Focus | None = None


class DanglingEdge(BaseModel):
    """An edge left out of a search result because an endpoint is missing."""

    edge_id: str
    from_id: str
    to_id: str
    missing: list[str]
