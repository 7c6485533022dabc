"""
Exploration orchestrator: drives the retrieval flows against the Graph API.

Each flow validates its input, publishes progress, awaits one fetch and only
then touches the GraphStore. All merging happens synchronously after the
flow's own await returns, so on a single event loop no two merges ever
interleave and the store needs no lock.

Flows never raise ExplorerError: failures are published on the notification
channel and returned as a FlowResult with status "error".
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Literal
from urllib.parse import quote

from .config import Settings, get_settings
from .errors import EmptySearch, ExplorerError, NoPath, ValidationError
from .exploration_client import ExplorationClient
from .graph import GraphStore, MergeResult, StateSerializer, ViewState
from .graph_client import GraphApiClient
from .logging_config import configure_logging, generate_flow_id
from .models import EDGE_TYPES
from .notifications import NodeDeselectedMessage, NodeDetail, NodeSelectedMessage, NotificationChannel

logger = logging.getLogger(__name__)

EMPTY_STATE_HINT = (
    "Search for legislation or load a topic cluster to begin exploring the legislative graph."
)
SUPERSEDED_MESSAGE = "Result discarded, a newer graph was requested"

# Prefix shown before a server/transport failure, per flow
ERROR_PREFIXES = {
    "load_neighborhood": "Error",
    "expand": "Error",
    "find_path": "Path error",
    "load_cluster": "Cluster error",
    "search": "Search error",
    "save_exploration": "Save error",
    "list_explorations": "Error loading explorations",
    "load_exploration": "Load error",
    "delete_exploration": "Delete error",
}


@dataclass
class FlowResult:
    """Outcome of one flow."""
    flow: str
    status: Literal["ok", "error", "stale"]
    message: str
    added_nodes: int = 0
    added_edges: int = 0
    error: ExplorerError | None = None
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


def _require_text(value: str | None, message: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(message)
    return text


def _require_depth(depth: Any) -> int:
    if isinstance(depth, bool) or not isinstance(depth, int) or depth < 1:
        raise ValidationError("Depth must be a positive integer")
    return depth


class ExplorationOrchestrator:
    """Owns one explorer's graph state and runs user-triggered flows on it."""

    def __init__(
        self,
        graph_client: GraphApiClient,
        exploration_client: ExplorationClient | None = None,
        store: GraphStore | None = None,
        view: ViewState | None = None,
        channel: NotificationChannel | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings if settings is not None else get_settings()
        self.graph_client = graph_client
        self.exploration_client = exploration_client
        self.store = store if store is not None else GraphStore(
            viewport=(self.settings.viewport_width, self.settings.viewport_height),
            radius_range=(self.settings.min_node_radius, self.settings.max_node_radius),
        )
        self.view = view if view is not None else ViewState()
        self.channel = channel if channel is not None else NotificationChannel()
        self.serializer = StateSerializer(self.store, self.view)
        # Bumped whenever the store is reset; results dispatched under an older
        # generation are stale
        self._generation = 0
        # Bumped when a destructive flow is dispatched; only the newest one may reset
        self._reset_ticket = 0

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ExplorationOrchestrator":
        settings = settings if settings is not None else get_settings()
        configure_logging(settings.log_level, settings.log_format, settings.log_module_levels)
        return cls(
            graph_client=GraphApiClient.from_settings(settings),
            exploration_client=ExplorationClient.from_settings(settings),
            settings=settings,
        )

    async def aclose(self) -> None:
        await self.graph_client.aclose()
        if self.exploration_client is not None:
            await self.exploration_client.aclose()

    @property
    def generation(self) -> int:
        return self._generation

    # ============================================================
    # RESULT HELPERS
    # ============================================================

    def _fail(self, flow: str, error: ExplorerError, fetch_failed: bool = False) -> FlowResult:
        message = error.user_message
        if fetch_failed:
            message = f"{ERROR_PREFIXES.get(flow, 'Error')}: {message}"
        logger.warning("Flow %s failed (%s): %s", flow, type(error).__name__, message)
        self.channel.error(flow, message, code=type(error).__name__, status=getattr(error, "status", None))
        return FlowResult(flow=flow, status="error", message=message, error=error)

    def _ok(self, flow: str, message: str, merged: MergeResult | None = None, data: Any = None) -> FlowResult:
        self.channel.result(flow, message)
        return FlowResult(
            flow=flow,
            status="ok",
            message=message,
            added_nodes=len(merged.added_nodes) if merged else 0,
            added_edges=len(merged.added_edges) if merged else 0,
            data=data,
        )

    def _is_stale(self, flow: str, dispatched_generation: int) -> bool:
        if dispatched_generation == self._generation or not self.settings.discard_stale_results:
            return False
        logger.info(
            "Discarding %s result from generation %d (current %d)",
            flow, dispatched_generation, self._generation,
        )
        return True

    def _stale(self, flow: str, message: str = "Result discarded after graph reset") -> FlowResult:
        return FlowResult(flow=flow, status="stale", message=message)

    def _take_reset_ticket(self) -> int:
        self._reset_ticket += 1
        return self._reset_ticket

    def _is_superseded(self, flow: str, ticket: int) -> bool:
        """A destructive flow is superseded once a newer destructive flow was dispatched."""
        if ticket == self._reset_ticket or not self.settings.discard_stale_results:
            return False
        logger.info("Discarding %s result: superseded by a newer reset request", flow)
        return True

    def _begin_reset(self) -> None:
        self._generation += 1
        self.store.reset()

    # ============================================================
    # RETRIEVAL FLOWS
    # ============================================================

    async def load_neighborhood(self, node_id: str) -> FlowResult:
        """Fetch a node with its neighbors, merge them and select the node."""
        generate_flow_id("load_neighborhood")
        return await self._load_neighborhood(node_id)

    async def _load_neighborhood(self, node_id: str) -> FlowResult:
        flow = "load_neighborhood"
        try:
            node_id = _require_text(node_id, "Enter a node ID")
        except ValidationError as e:
            return self._fail(flow, e)

        dispatched = self._generation
        self.channel.progress(flow)
        logger.info("Loading neighborhood of %s", node_id)
        try:
            result = await self.graph_client.fetch_node(node_id)
        except ExplorerError as e:
            return self._fail(flow, e, fetch_failed=True)

        if self._is_stale(flow, dispatched):
            return self._stale(flow)

        merged = self.store.merge(result.all_nodes, result.edges)
        response = self._ok(flow, f"Loaded: {result.node.label}", merged)
        self.select_node(result.node.id)
        return response

    async def expand(
        self,
        node_id: str,
        visible_edge_types: Iterable[str] | None = None,
        depth: int | None = None,
    ) -> FlowResult:
        """Additively merge a depth-bounded neighborhood restricted to visible edge types."""
        flow = "expand"
        generate_flow_id(flow)
        try:
            node_id = _require_text(node_id, "Select a node to expand")
            depth = _require_depth(self.view.depth if depth is None else depth)
        except ValidationError as e:
            return self._fail(flow, e)

        if visible_edge_types is None:
            edge_types = self.view.edge_types_param()
        else:
            wanted = set(visible_edge_types)
            edge_types = ",".join(t for t in EDGE_TYPES if t in wanted)

        dispatched = self._generation
        self.channel.progress(flow)
        logger.info("Expanding %s (depth=%d, edge_types=%s)", node_id, depth, edge_types)
        try:
            result = await self.graph_client.fetch_expand(node_id, edge_types, depth)
        except ExplorerError as e:
            return self._fail(flow, e, fetch_failed=True)

        if self._is_stale(flow, dispatched):
            return self._stale(flow)

        merged = self.store.merge(result.nodes, result.edges)
        return self._ok(flow, f"Added {len(result.nodes)} nodes", merged)

    async def find_path(self, from_id: str, to_id: str) -> FlowResult:
        """Fetch the shortest path between two nodes, merge it and highlight it."""
        flow = "find_path"
        generate_flow_id(flow)
        if not (from_id or "").strip() or not (to_id or "").strip():
            return self._fail(flow, ValidationError("Enter both node IDs"))
        from_id, to_id = from_id.strip(), to_id.strip()

        dispatched = self._generation
        self.channel.progress(flow)
        logger.info("Finding path %s -> %s", from_id, to_id)
        try:
            result = await self.graph_client.fetch_path(from_id, to_id)
        except ExplorerError as e:
            return self._fail(flow, e, fetch_failed=True)

        if not result.reachable:
            return self._fail(flow, NoPath())

        if self._is_stale(flow, dispatched):
            return self._stale(flow)

        merged = self.store.merge(result.path, result.edges)
        self.store.highlights.highlight_path(result.path, result.edges)
        return self._ok(flow, f"Path found: {result.distance} hops", merged)

    async def load_cluster(
        self,
        topic_slug: str,
        limit: int | None = None,
        min_similarity: float | None = None,
    ) -> FlowResult:
        """Replace the whole graph with a topic cluster."""
        flow = "load_cluster"
        generate_flow_id(flow)
        try:
            topic_slug = _require_text(topic_slug, "Enter a topic slug")
        except ValidationError as e:
            return self._fail(flow, e)
        limit = self.settings.cluster_limit if limit is None else limit
        min_similarity = self.settings.cluster_min_similarity if min_similarity is None else min_similarity
        if limit < 1:
            return self._fail(flow, ValidationError("Limit must be a positive integer"))

        ticket = self._take_reset_ticket()
        self.channel.progress(flow)
        logger.info("Loading cluster %s (limit=%d, min_similarity=%s)", topic_slug, limit, min_similarity)
        try:
            result = await self.graph_client.fetch_cluster(topic_slug, limit, min_similarity)
        except ExplorerError as e:
            return self._fail(flow, e, fetch_failed=True)

        if self._is_superseded(flow, ticket):
            return self._stale(flow, SUPERSEDED_MESSAGE)

        # Cluster views are self-contained: drop everything first
        self._begin_reset()
        merged = self.store.merge(result.nodes, result.edges)
        topic = result.topic_name or topic_slug
        return self._ok(flow, f"Loaded: {topic} ({len(result.nodes)} nodes)", merged)

    async def search(self, query: str) -> FlowResult:
        """Load the neighborhood of the best search match."""
        flow = "search"
        generate_flow_id(flow)
        try:
            query = _require_text(query, "Enter a search query")
        except ValidationError as e:
            return self._fail(flow, e)

        dispatched = self._generation
        self.channel.progress(flow)
        try:
            result = await self.graph_client.search(query)
        except ExplorerError as e:
            return self._fail(flow, e, fetch_failed=True)

        best = result.items[0].resolved_id if result.items else None
        if not best:
            return self._fail(flow, EmptySearch())

        if self._is_stale(flow, dispatched):
            return self._stale(flow)

        logger.info("Search %r resolved to %s", query[:50], best)
        return await self._load_neighborhood(best)

    # ============================================================
    # SELECTION AND VIEW
    # ============================================================

    def select_node(self, node_id: str) -> NodeDetail | None:
        """Select a node and publish its details when it is in the graph."""
        self.store.highlights.select(node_id)
        node = self.store.get_node(node_id)
        if node is None:
            return None
        detail = NodeDetail.from_node(node)
        self.channel.publish(NodeSelectedMessage(node=detail))
        return detail

    def deselect(self) -> None:
        self.store.highlights.deselect()
        self.channel.publish(NodeDeselectedMessage())

    def set_edge_type_visible(self, edge_type: str, visible: bool) -> None:
        self.view.set_edge_type_visible(edge_type, visible)

    def set_depth(self, depth: int) -> None:
        self.view.depth = _require_depth(depth)

    def zoom_in(self) -> None:
        self.view.zoom_in()

    def zoom_out(self) -> None:
        self.view.zoom_out()

    def zoom_reset(self) -> None:
        self.view.zoom_reset()

    # ============================================================
    # SAVED EXPLORATIONS
    # ============================================================

    def _explorations(self) -> ExplorationClient:
        if self.exploration_client is None:
            raise RuntimeError("No exploration client configured")
        return self.exploration_client

    async def save_exploration(self, title: str, description: str = "", is_public: bool = False) -> FlowResult:
        """Persist the current graph and view as a named exploration."""
        flow = "save_exploration"
        generate_flow_id(flow)
        client = self._explorations()
        try:
            title = _require_text(title, "Title is required")
            if len(self.store) == 0:
                raise ValidationError("Nothing to save, explore some legislation first")
        except ValidationError as e:
            return self._fail(flow, e)

        graph_state = self.serializer.to_json()
        self.channel.progress(flow)
        try:
            saved = await client.save(title, (description or "").strip(), graph_state, is_public)
        except ExplorerError as e:
            return self._fail(flow, e, fetch_failed=True)
        return self._ok(flow, f"Saved: {saved.title}", data=saved)

    async def list_explorations(self) -> FlowResult:
        flow = "list_explorations"
        generate_flow_id(flow)
        client = self._explorations()
        self.channel.progress(flow)
        try:
            explorations = await client.list()
        except ExplorerError as e:
            return self._fail(flow, e, fetch_failed=True)
        message = f"{len(explorations)} saved explorations" if explorations else "No saved explorations yet."
        return self._ok(flow, message, data=explorations)

    async def load_exploration(self, exploration_id: str) -> FlowResult:
        """Replace the current state with a saved exploration."""
        flow = "load_exploration"
        generate_flow_id(flow)
        client = self._explorations()
        try:
            exploration_id = _require_text(exploration_id, "Enter an exploration ID")
        except ValidationError as e:
            return self._fail(flow, e)

        ticket = self._take_reset_ticket()
        self.channel.progress(flow)
        try:
            exploration = await client.load(exploration_id)
            snapshot = self.serializer.parse(exploration.graph_state)
        except ExplorerError as e:
            return self._fail(flow, e, fetch_failed=True)

        if self._is_superseded(flow, ticket):
            return self._stale(flow, SUPERSEDED_MESSAGE)

        self._generation += 1
        self.serializer.deserialize(snapshot)
        response = self._ok(
            flow,
            f"Loaded: {exploration.title}",
            MergeResult(
                added_nodes=[n.id for n in self.store.nodes],
                added_edges=[e.key for e in self.store.edges],
            ),
            data=exploration,
        )
        selected = self.store.highlights.selected_node_id
        if selected:
            self.select_node(selected)
        return response

    async def delete_exploration(self, exploration_id: str) -> FlowResult:
        flow = "delete_exploration"
        generate_flow_id(flow)
        client = self._explorations()
        try:
            exploration_id = _require_text(exploration_id, "Enter an exploration ID")
        except ValidationError as e:
            return self._fail(flow, e)

        self.channel.progress(flow)
        try:
            await client.delete(exploration_id)
        except ExplorerError as e:
            return self._fail(flow, e, fetch_failed=True)
        return self._ok(flow, "Exploration deleted")

    def share_url(self, exploration_id: str) -> str:
        base = self.settings.share_base_url.rstrip("/")
        return f"{base}/explore?state={quote(str(exploration_id), safe='')}"

    # ============================================================
    # START-UP
    # ============================================================

    async def start(
        self,
        initial_node_id: str | None = None,
        initial_exploration_id: str | None = None,
    ) -> FlowResult | None:
        """Open the explorer on a node, a saved exploration, or the empty state."""
        if initial_node_id:
            return await self.load_neighborhood(initial_node_id)
        if initial_exploration_id:
            return await self.load_exploration(initial_exploration_id)
        self.channel.result("start", EMPTY_STATE_HINT)
        return None
