"""Shared pytest fixtures for gremlink tests."""

import pytest
from dotenv import load_dotenv
from hypothesis import settings

from gremlin_fakes import InMemoryGraph, InMemoryTraversalClient
from gremlink.core.config import GremlinkConfig
from gremlink.graph.connection import ConnectionManager, NeptuneConfig
from gremlink.graph.executor import QueryRetryPolicy, RetryingQueryExecutor

# Load environment variables from .env file
load_dotenv()

# Configure hypothesis for property-based testing
settings.register_profile("ci", max_examples=100, deadline=None)
settings.register_profile("dev", max_examples=20, deadline=None)
settings.load_profile("dev")


@pytest.fixture
def neptune_config() -> NeptuneConfig:
    """Endpoint configuration that never touches the environment."""
    return NeptuneConfig(host="db.cluster.example.com", port=8182)


@pytest.fixture
def graph() -> InMemoryGraph:
    return InMemoryGraph()


@pytest.fixture
def traversal_client(graph: InMemoryGraph) -> InMemoryTraversalClient:
    return InMemoryTraversalClient(graph)


@pytest.fixture
def manager(
    neptune_config: NeptuneConfig, traversal_client: InMemoryTraversalClient
) -> ConnectionManager:
    return ConnectionManager(neptune_config, client=traversal_client)


@pytest.fixture
def sleeps() -> list[float]:
    """Collects the waits requested by the executor."""
    return []


@pytest.fixture
def executor(manager: ConnectionManager, sleeps: list[float]) -> RetryingQueryExecutor:
    return RetryingQueryExecutor(manager, QueryRetryPolicy(), sleep=sleeps.append)


@pytest.fixture
def settings_no_env() -> GremlinkConfig:
    return GremlinkConfig(_env_file=None)
