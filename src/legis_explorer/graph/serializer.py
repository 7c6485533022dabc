"""
Snapshot serialization for saved explorations.

A snapshot holds the graph (semantic node fields and plain edge references),
node positions and pins, and the view state. Key names follow the JSON the
web explorer has always stored, so older saved explorations keep loading.
"""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..errors import MalformedResponse
from ..models import EDGE_TYPES, Edge, Node
from .store import GraphStore
from .view import CameraTransform, ViewState

logger = logging.getLogger(__name__)


class NodePosition(BaseModel):
    x: float | None = None
    y: float | None = None
    fx: float | None = None
    fy: float | None = None


class GraphSnapshot(BaseModel):
    """Portable, JSON-friendly copy of one explorer's state.

    Every field is optional so partial or older snapshots still load.
    """

    model_config = ConfigDict(populate_by_name=True)

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)
    node_positions: dict[str, NodePosition] = Field(default_factory=dict, alias="nodePositions")
    selected_node_id: str | None = Field(None, alias="selectedNodeId")
    visible_edge_types: list[str] | None = Field(None, alias="visibleEdgeTypes")
    depth: int | None = None
    zoom: CameraTransform | None = None

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, value: Any) -> Any:
        # Older clients wrote null for fields they had no value for
        if isinstance(value, dict):
            return {k: v for k, v in value.items() if v is not None}
        return value

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class StateSerializer:
    """Converts a GraphStore plus its ViewState to and from GraphSnapshot."""

    def __init__(self, store: GraphStore, view: ViewState):
        self.store = store
        self.view = view

    def serialize(self) -> GraphSnapshot:
        """Capture the current state; does not modify anything."""
        return GraphSnapshot(
            nodes=[node.semantic() for node in self.store.nodes],
            edges=self.store.edges,
            node_positions={
                node_id: NodePosition(**pos) for node_id, pos in self.store.positions().items()
            },
            selected_node_id=self.store.highlights.selected_node_id,
            visible_edge_types=[t for t in EDGE_TYPES if t in self.view.visible_edge_types],
            depth=self.view.depth,
            zoom=self.view.camera.model_copy(),
        )

    def to_json(self) -> str:
        return self.serialize().to_json()

    @staticmethod
    def parse(data: "GraphSnapshot | str | dict[str, Any]") -> GraphSnapshot:
        """Validate a snapshot given as a model, JSON text or decoded dict."""
        if isinstance(data, GraphSnapshot):
            return data
        try:
            if isinstance(data, str):
                return GraphSnapshot.model_validate_json(data)
            return GraphSnapshot.model_validate(data)
        except ValidationError as e:
            logger.error("Invalid graph snapshot: %s", e)
            raise MalformedResponse("Saved exploration is not a valid graph state") from e

    def deserialize(self, data: "GraphSnapshot | str | dict[str, Any]") -> GraphSnapshot:
        """
        Replace the current state with a snapshot.

        Nodes are merged before edges. Nodes without a saved position keep
        their freshly seeded one. Absent view fields fall back to defaults.
        Selection is restored on the highlighter; callers that show node
        details re-run their own selection side effects afterwards.
        """
        snapshot = self.parse(data)

        self.store.reset()
        self.store.merge(snapshot.nodes, [])

        for node_id, saved in snapshot.node_positions.items():
            node = self.store.get_node(node_id)
            if node is None:
                continue
            if saved.x is not None and saved.y is not None:
                node.x, node.y = saved.x, saved.y
            node.fx, node.fy = saved.fx, saved.fy

        self.store.merge([], snapshot.edges)
        self.store.compute_degrees()

        self.view.visible_edge_types = (
            set(EDGE_TYPES) if snapshot.visible_edge_types is None
            else set(snapshot.visible_edge_types) & set(EDGE_TYPES)
        )
        self.view.depth = snapshot.depth if snapshot.depth and snapshot.depth >= 1 else 1
        self.view.camera = snapshot.zoom.model_copy() if snapshot.zoom else CameraTransform()

        if snapshot.selected_node_id:
            self.store.highlights.select(snapshot.selected_node_id)

        logger.info(
            "Restored snapshot: %d nodes, %d edges",
            len(self.store), len(self.store.edges),
        )
        return snapshot
