"""
Wire and domain models for the legislative graph.

Graph API payloads are validated here, at the boundary. Anything that passes
validation is safe to merge; anything that does not becomes a
MalformedResponse in the client layer.
"""

from typing import Any, Literal, get_args

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_serializer,
    model_validator,
)


EdgeType = Literal["references", "amends", "supersedes", "implements", "delegates", "similar_to"]

# Canonical order, used for filters and query parameters
EDGE_TYPES: tuple[str, ...] = get_args(EdgeType)


# =============================================================================
# Polymorphic fields
# =============================================================================

class TaggedValue(BaseModel):
    """A field the server sends either as a plain string or as ``{kind, ...}``.

    Normalized to ``kind`` plus a ``tagged`` flag remembering the wire shape,
    so serializing gives back exactly what was received.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    kind: str
    tagged: bool = False

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"kind": value, "tagged": False}
        if isinstance(value, dict) and "tagged" not in value:
            return {**value, "tagged": True}
        return value

    @model_serializer
    def _to_wire(self) -> Any:
        if not self.tagged:
            return self.kind
        return {"kind": self.kind, **(self.model_extra or {})}


class Level(TaggedValue):
    """Government level (federal, state, county, municipal)."""


class Status(TaggedValue):
    """Legislative status (introduced, enacted, ...)."""


# =============================================================================
# Nodes and edges
# =============================================================================

class Node(BaseModel):
    """A legislative item or government level as sent by the Graph API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Opaque, globally unique key")
    label: str = Field(..., description="Display name")
    level: Level | None = None
    status: Status | None = None
    date: str | None = None
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Open map: sponsors, topics, source_identifier, legislation_type",
    )
    node_type: str | None = Field(
        None,
        validation_alias=AliasChoices("type", "node_type"),
        serialization_alias="type",
    )

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_default(cls, value: Any) -> Any:
        return {} if value is None else value


# Fields persisted in a snapshot; everything else on GraphNode is derived or layout state
NODE_SEMANTIC_FIELDS = set(Node.model_fields)


class GraphNode(Node):
    """A node once merged into a GraphStore.

    ``degree`` is derived by the store. ``x``/``y`` belong to the render
    adapter after creation; ``fx``/``fy`` hold an optional user pin.
    """

    degree: int = Field(0, ge=0)
    x: float = 0.0
    y: float = 0.0
    fx: float | None = None
    fy: float | None = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None and self.fy is not None

    def semantic(self) -> Node:
        """Return the node stripped of derived and layout fields."""
        return Node.model_validate(self.model_dump(include=NODE_SEMANTIC_FIELDS))


class Edge(BaseModel):
    """A typed relation between two nodes."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: str
    target: str
    edge_type: EdgeType = Field(
        ...,
        validation_alias=AliasChoices("type", "edge_type"),
        serialization_alias="type",
    )
    weight: float = 1.0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("weight", mode="before")
    @classmethod
    def _weight_default(cls, value: Any) -> Any:
        return 1.0 if value is None else value

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_default(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def key(self) -> tuple[str, str, str]:
        """Identity triple; distinct types between the same endpoints coexist."""
        return (self.source, self.target, self.edge_type)

    @property
    def undirected_key(self) -> tuple[str, str]:
        """Endpoint pair independent of traversal direction."""
        return undirected_key(self.source, self.target)


def undirected_key(a: str, b: str) -> tuple[str, str]:
    return (a, b) if a <= b else (b, a)


# =============================================================================
# Graph API responses
# =============================================================================

class NeighborhoodResponse(BaseModel):
    """GET node/{id}"""
    node: Node
    neighbors: list[Node]
    edges: list[Edge]

    @property
    def all_nodes(self) -> list[Node]:
        return [self.node, *self.neighbors]


class SubgraphResponse(BaseModel):
    """GET expand/{id}"""
    nodes: list[Node]
    edges: list[Edge]


class ClusterResponse(SubgraphResponse):
    """GET cluster/{slug}"""
    topic_name: str | None = None


class PathResponse(BaseModel):
    """GET path/{from}/{to}; distance -1 means unreachable."""
    path: list[Node]
    edges: list[Edge]
    distance: int

    @property
    def reachable(self) -> bool:
        return self.distance >= 0


class LegislationRef(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)
    id: str


class SearchItem(BaseModel):
    """A search hit; either carries its own id or wraps a legislation record."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str | None = None
    legislation: LegislationRef | None = None

    @property
    def resolved_id(self) -> str | None:
        if self.legislation is not None:
            return self.legislation.id
        return self.id


class SearchResponse(BaseModel):
    items: list[SearchItem]


# =============================================================================
# Persistence API
# =============================================================================

class ExplorationSummary(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    title: str
    description: str | None = None
    is_public: bool = False


class ExplorationList(BaseModel):
    explorations: list[ExplorationSummary]


class SavedExploration(BaseModel):
    """Response to POST /explorations."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    title: str


class Exploration(BaseModel):
    """A stored exploration; ``graph_state`` is the snapshot JSON (string or object)."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    title: str
    graph_state: str | dict[str, Any]
