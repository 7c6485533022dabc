"""Graph API client: neighborhoods, expansion, paths, clusters and search."""

import logging

import httpx

from .api_client import ApiClient, encode_segment
from .config import Settings
from .models import (
    ClusterResponse,
    NeighborhoodResponse,
    PathResponse,
    SearchResponse,
    SubgraphResponse,
)

logger = logging.getLogger(__name__)


class GraphApiClient(ApiClient):
    """Read-only client for the legislative graph endpoints."""

    def __init__(
        self,
        base_url: str,
        search_url: str,
        api_key: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(api_key=api_key, timeout=timeout, http_client=http_client)
        self.base_url = base_url.rstrip("/")
        self.search_url = search_url

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient | None = None) -> "GraphApiClient":
        return cls(
            base_url=settings.graph_api_url,
            search_url=settings.search_api_url,
            api_key=settings.api_key,
            timeout=settings.request_timeout,
            http_client=http_client,
        )

    async def fetch_node(self, node_id: str) -> NeighborhoodResponse:
        """Fetch a node with its direct neighbors and connecting edges."""
        url = f"{self.base_url}/node/{encode_segment(node_id)}"
        result = await self._request_model("GET", url, NeighborhoodResponse)
        logger.info("Node %s: %d neighbors, %d edges", node_id, len(result.neighbors), len(result.edges))
        return result

    async def fetch_expand(self, node_id: str, edge_types: str | None, depth: int) -> SubgraphResponse:
        """Fetch a server-computed neighborhood bounded by depth.

        Args:
            node_id: Node to expand from
            edge_types: Comma-separated edge types to follow; None or "" for all
            depth: Hop bound (positive)
        """
        params: dict[str, str] = {"depth": str(depth)}
        if edge_types:
            params["edge_types"] = edge_types
        url = f"{self.base_url}/expand/{encode_segment(node_id)}"
        result = await self._request_model("GET", url, SubgraphResponse, params=params)
        logger.info("Expand %s depth=%d: %d nodes, %d edges", node_id, depth, len(result.nodes), len(result.edges))
        return result

    async def fetch_path(self, from_id: str, to_id: str) -> PathResponse:
        """Fetch the shortest path by hop count; distance -1 when unreachable."""
        url = f"{self.base_url}/path/{encode_segment(from_id)}/{encode_segment(to_id)}"
        result = await self._request_model("GET", url, PathResponse)
        logger.info("Path %s -> %s: distance %d", from_id, to_id, result.distance)
        return result

    async def fetch_cluster(self, topic_slug: str, limit: int, min_similarity: float) -> ClusterResponse:
        """Fetch a topic-bounded subgraph."""
        params = {"limit": str(limit), "min_similarity": str(min_similarity)}
        url = f"{self.base_url}/cluster/{encode_segment(topic_slug)}"
        result = await self._request_model("GET", url, ClusterResponse, params=params)
        logger.info("Cluster %s: %d nodes, %d edges", topic_slug, len(result.nodes), len(result.edges))
        return result

    async def search(self, query: str) -> SearchResponse:
        """Full-text legislation search."""
        result = await self._request_model("GET", self.search_url, SearchResponse, params={"q": query})
        logger.info("Search %r: %d results", query[:50], len(result.items))
        return result
