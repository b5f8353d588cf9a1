"""Integration tests against a real Gremlin endpoint.

Skipped unless GREMLINK_NEPTUNE_ENDPOINT (or NEPTUNE_ENDPOINT) is set. The
tests write vertices and edges with a unique prefix and delete them again.
"""

import os
import uuid

import pytest

from gremlink.client import GremlinkClient
from gremlink.core.models import Edge, Focus, Node, SearchOptions
from gremlink.graph.connection import NeptuneConfig

pytestmark = [
    pytest.mark.live,
    pytest.mark.skipif(
        not (os.getenv("GREMLINK_NEPTUNE_ENDPOINT") or os.getenv("NEPTUNE_ENDPOINT")),
        reason="No Gremlin endpoint configured",
    ),
]


@pytest.fixture
def client():
    with GremlinkClient(NeptuneConfig.from_env()) as c:
        c.connect()
        yield c


@pytest.fixture
def prefix() -> str:
    return f"gremlink-test-{uuid.uuid4().hex[:8]}"


def test_upsert_search_delete(client: GremlinkClient, prefix: str) -> None:
    person, car, edge_id = f"{prefix}-v1", f"{prefix}-v2", f"{prefix}-e1"
    try:
        client.save_node(Node(id=person, labels=["person"], properties={"name": prefix}))
        client.save_node(Node(id=car, labels=["car"], properties={"color": "Blue"}))
        client.save_edge(Edge(id=edge_id, label="owns", from_=person, to=car, properties={"since": 2020}))

        focus = SearchOptions(focus=Focus(label="person", key="name", value=prefix))
        result = client.search(focus)

        assert result.node_ids() == {person, car}
        assert [(e.id, e.from_, e.to) for e in result.edges] == [(edge_id, person, car)]

        client.save_node(Node(id=person, labels=["person"], properties={"name": prefix, "age": 3}))
        node = next(n for n in client.search(focus).nodes if n.id == person)
        assert node.properties == {"name": prefix, "age": 3}
    finally:
        client.delete_node(person)
        client.delete_node(car)

    assert client.search(SearchOptions(focus=Focus(label="person", key="name", value=prefix))).nodes == []
