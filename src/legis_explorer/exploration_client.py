"""Persistence API client for saved explorations."""

import logging

import httpx

from .api_client import ApiClient, encode_segment
from .config import Settings
from .models import Exploration, ExplorationList, ExplorationSummary, SavedExploration

logger = logging.getLogger(__name__)


class ExplorationClient(ApiClient):
    """CRUD client for ``/explorations``."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(api_key=api_key, timeout=timeout, http_client=http_client)
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient | None = None) -> "ExplorationClient":
        return cls(
            base_url=settings.explorations_api_url,
            api_key=settings.api_key,
            timeout=settings.request_timeout,
            http_client=http_client,
        )

    async def save(self, title: str, description: str, graph_state: str, is_public: bool) -> SavedExploration:
        """Store a new exploration; ``graph_state`` is the snapshot JSON text."""
        payload = {
            "title": title,
            "description": description,
            "graph_state": graph_state,
            "is_public": is_public,
        }
        result = await self._request_model("POST", self.base_url, SavedExploration, json=payload)
        logger.info("Saved exploration %s (%s)", result.id, result.title)
        return result

    async def list(self) -> list[ExplorationSummary]:
        result = await self._request_model("GET", self.base_url, ExplorationList)
        return result.explorations

    async def load(self, exploration_id: str) -> Exploration:
        url = f"{self.base_url}/{encode_segment(exploration_id)}"
        return await self._request_model("GET", url, Exploration)

    async def delete(self, exploration_id: str) -> None:
        """Delete an exploration; any 2xx (204 included) counts as success."""
        url = f"{self.base_url}/{encode_segment(exploration_id)}"
        await self._send("DELETE", url)
        logger.info("Deleted exploration %s", exploration_id)
