"""
In-memory graph store for one explorer instance.

Nodes and edges only ever enter through ``merge``; they are never removed
individually. ``reset`` clears everything at once.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Iterable, Literal

from ..models import Edge, GraphNode, Node
from .highlight import PathHighlighter

logger = logging.getLogger(__name__)

# Spread of the pseudo-random seed around the viewport center
SEED_SPREAD = 100.0


@dataclass
class MergeResult:
    """What a single merge changed."""
    added_nodes: list[str] = field(default_factory=list)
    added_edges: list[tuple[str, str, str]] = field(default_factory=list)
    dropped_edges: int = 0  # duplicates or missing endpoints

    @property
    def changed(self) -> bool:
        return bool(self.added_nodes or self.added_edges)


@dataclass
class StoreChange:
    """Event delivered to subscribers after every mutation."""
    kind: Literal["merge", "reset", "positions"]
    merge: MergeResult | None = None


StoreListener = Callable[[StoreChange], None]


class GraphStore:
    """
    Node/edge repository with identity-based deduplication.

    Node identity is ``id``; edge identity is ``(source, target, edge_type)``.
    An edge is accepted only when both of its endpoints are already present.
    """

    def __init__(
        self,
        highlights: PathHighlighter | None = None,
        viewport: tuple[float, float] = (800.0, 500.0),
        radius_range: tuple[float, float] = (6.0, 24.0),
        rng: random.Random | None = None,
    ):
        self.highlights = highlights or PathHighlighter()
        self.viewport = viewport
        self.min_radius, self.max_radius = radius_range
        self._rng = rng or random.Random()
        self._nodes: dict[str, GraphNode] = {}
        self._edges: list[Edge] = []
        self._edge_keys: set[tuple[str, str, str]] = set()
        self._listeners: list[StoreListener] = []
        self.max_degree = 1

    # ============================================================
    # READ ACCESS
    # ============================================================

    @property
    def nodes(self) -> list[GraphNode]:
        return list(self._nodes.values())

    @property
    def edges(self) -> list[Edge]:
        return list(self._edges)

    def get_node(self, node_id: str) -> GraphNode | None:
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def has_edge(self, edge: Edge) -> bool:
        return edge.key in self._edge_keys

    def edges_touching(self, node_id: str) -> list[Edge]:
        return [e for e in self._edges if node_id in (e.source, e.target)]

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    # ============================================================
    # MUTATION
    # ============================================================

    def merge(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> MergeResult:
        """
        Add unseen nodes, then unseen edges whose endpoints exist.

        Re-merging a known node never updates its fields. Degrees are
        recomputed before returning.
        """
        result = MergeResult()

        for node in nodes:
            if node.id in self._nodes:
                continue
            self._nodes[node.id] = self._create_node(node)
            result.added_nodes.append(node.id)

        for edge in edges:
            if edge.key in self._edge_keys:
                result.dropped_edges += 1
                continue
            if edge.source not in self._nodes or edge.target not in self._nodes:
                # Relies on the server sending every endpoint with its edges
                logger.warning(
                    "Dropping edge %s -[%s]-> %s: endpoint not in graph",
                    edge.source, edge.edge_type, edge.target,
                )
                result.dropped_edges += 1
                continue
            self._edges.append(edge)
            self._edge_keys.add(edge.key)
            result.added_edges.append(edge.key)

        self.compute_degrees()
        logger.debug(
            "Merged %d nodes, %d edges (%d dropped); store now %d nodes, %d edges",
            len(result.added_nodes), len(result.added_edges), result.dropped_edges,
            len(self._nodes), len(self._edges),
        )
        self._emit(StoreChange(kind="merge", merge=result))
        return result

    def _create_node(self, node: Node) -> GraphNode:
        cx, cy = self.viewport[0] / 2, self.viewport[1] / 2
        return GraphNode.model_validate({
            **node.model_dump(),
            "x": cx + (self._rng.random() - 0.5) * SEED_SPREAD,
            "y": cy + (self._rng.random() - 0.5) * SEED_SPREAD,
        })

    def compute_degrees(self) -> None:
        """Recount every node's degree from the current edge set."""
        for node in self._nodes.values():
            node.degree = 0
        for edge in self._edges:
            self._nodes[edge.source].degree += 1
            self._nodes[edge.target].degree += 1
        self.max_degree = max([1, *(n.degree for n in self._nodes.values())])

    def radius(self, node: GraphNode) -> float:
        """Visual radius interpolated linearly by degree / max_degree."""
        ratio = min(1.0, max(0.0, node.degree / self.max_degree))
        return self.min_radius + ratio * (self.max_radius - self.min_radius)

    def reset(self) -> None:
        """Drop all nodes, edges, highlights and the selection."""
        self._nodes = {}
        self._edges = []
        self._edge_keys = set()
        self.max_degree = 1
        self.highlights.clear()
        self._emit(StoreChange(kind="reset"))

    # ============================================================
    # POSITIONS (owned by the render adapter)
    # ============================================================

    def set_position(self, node_id: str, x: float, y: float) -> None:
        node = self._require(node_id)
        node.x, node.y = x, y

    def pin(self, node_id: str, fx: float, fy: float) -> None:
        node = self._require(node_id)
        node.fx, node.fy = fx, fy
        self._emit(StoreChange(kind="positions"))

    def unpin(self, node_id: str) -> None:
        node = self._require(node_id)
        node.fx = node.fy = None
        self._emit(StoreChange(kind="positions"))

    def positions(self) -> dict[str, dict[str, float | None]]:
        return {
            n.id: {"x": n.x, "y": n.y, "fx": n.fx, "fy": n.fy}
            for n in self._nodes.values()
        }

    def _require(self, node_id: str) -> GraphNode:
        node = self._nodes.get(node_id)
        if node is None:
            raise KeyError(node_id)
        return node

    # ============================================================
    # CHANGE NOTIFICATIONS
    # ============================================================

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, change: StoreChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("Store listener failed on %s", change.kind)
