"""Shared fixtures for legislative explorer tests.

This module provides pytest fixtures for:
- Settings with deterministic defaults
- Node/edge factories
- A seeded GraphStore and an orchestrator wired to mocked API clients
"""

import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from legis_explorer.config import Settings
from legis_explorer.exploration_client import ExplorationClient
from legis_explorer.graph import GraphStore
from legis_explorer.graph_client import GraphApiClient
from legis_explorer.models import Edge, Node
from legis_explorer.notifications import NotificationChannel
from legis_explorer.orchestrator import ExplorationOrchestrator


# ============================================================================
# Settings Fixtures
# ============================================================================

@pytest.fixture
def test_settings():
    """Override explorer settings for testing.

    Returns settings with:
    - local API URLs that are never contacted (clients are mocked)
    - discard_stale_results=True: the default epoch behavior
    - log_level="WARNING": quiet test output
    """
    return Settings(
        graph_api_url="http://test/api/explore",
        search_api_url="http://test/api/search",
        explorations_api_url="http://test/api/explorations",
        share_base_url="http://test",
        api_key=None,
        request_timeout=None,
        viewport_width=800.0,
        viewport_height=500.0,
        min_node_radius=6.0,
        max_node_radius=24.0,
        cluster_limit=50,
        cluster_min_similarity=0.3,
        discard_stale_results=True,
        log_level="WARNING",
        log_format="text",
        log_module_levels={},
    )


# ============================================================================
# Data Factories
# ============================================================================

@pytest.fixture
def make_node():
    """Factory for Graph API nodes with sensible defaults."""

    def _make(node_id: str, **overrides) -> Node:
        fields = {
            "id": node_id,
            "label": f"Bill {node_id}",
            "level": {"kind": "federal"},
            "status": "introduced",
            "metadata": {},
            "type": "legislation",
        }
        fields.update(overrides)
        return Node.model_validate(fields)

    return _make


@pytest.fixture
def make_edge():
    """Factory for Graph API edges."""

    def _make(source: str, target: str, edge_type: str = "references", **overrides) -> Edge:
        fields = {"source": source, "target": target, "type": edge_type, "weight": 1.0, "metadata": {}}
        fields.update(overrides)
        return Edge.model_validate(fields)

    return _make


# ============================================================================
# Engine Fixtures
# ============================================================================

@pytest.fixture
def store():
    """GraphStore with a seeded RNG so positions are reproducible."""
    return GraphStore(rng=random.Random(1234))


@pytest.fixture
def mock_graph_client():
    """Mock Graph API client; set return values per test."""
    client = MagicMock(spec=GraphApiClient)
    client.fetch_node = AsyncMock()
    client.fetch_expand = AsyncMock()
    client.fetch_path = AsyncMock()
    client.fetch_cluster = AsyncMock()
    client.search = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def mock_exploration_client():
    """Mock Persistence API client."""
    client = MagicMock(spec=ExplorationClient)
    client.save = AsyncMock()
    client.list = AsyncMock()
    client.load = AsyncMock()
    client.delete = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def channel():
    return NotificationChannel()


@pytest.fixture
def orchestrator(mock_graph_client, mock_exploration_client, store, channel, test_settings):
    """Orchestrator wired to mocked clients and the seeded store."""
    return ExplorationOrchestrator(
        graph_client=mock_graph_client,
        exploration_client=mock_exploration_client,
        store=store,
        channel=channel,
        settings=test_settings,
    )
