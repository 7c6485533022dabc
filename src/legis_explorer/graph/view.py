"""View state that is not part of the graph: filters, depth and camera."""

from typing import Iterable

from pydantic import BaseModel

from ..models import EDGE_TYPES, Edge

MIN_ZOOM = 0.1
MAX_ZOOM = 8.0
ZOOM_IN_FACTOR = 1.3
ZOOM_OUT_FACTOR = 0.7


class CameraTransform(BaseModel):
    """Scale ``k`` plus translate offsets ``x``/``y``."""

    k: float = 1.0
    x: float = 0.0
    y: float = 0.0


class ViewState:
    """Edge-type filter, expand depth and camera of one explorer instance."""

    def __init__(
        self,
        visible_edge_types: Iterable[str] | None = None,
        depth: int = 1,
        camera: CameraTransform | None = None,
    ):
        self.visible_edge_types: set[str] = (
            set(EDGE_TYPES) if visible_edge_types is None else set(visible_edge_types)
        )
        self.depth = depth
        self.camera = camera or CameraTransform()

    def set_edge_type_visible(self, edge_type: str, visible: bool) -> None:
        if edge_type not in EDGE_TYPES:
            raise ValueError(f"Unknown edge type: {edge_type}")
        if visible:
            self.visible_edge_types.add(edge_type)
        else:
            self.visible_edge_types.discard(edge_type)

    def is_edge_visible(self, edge: Edge) -> bool:
        return edge.edge_type in self.visible_edge_types

    def edge_types_param(self) -> str:
        """Comma-separated visible types in canonical order."""
        return ",".join(t for t in EDGE_TYPES if t in self.visible_edge_types)

    # Camera

    def _scale_by(self, factor: float) -> None:
        k = min(MAX_ZOOM, max(MIN_ZOOM, self.camera.k * factor))
        self.camera = self.camera.model_copy(update={"k": k})

    def zoom_in(self) -> None:
        self._scale_by(ZOOM_IN_FACTOR)

    def zoom_out(self) -> None:
        self._scale_by(ZOOM_OUT_FACTOR)

    def zoom_reset(self) -> None:
        self.camera = CameraTransform()

    def reset(self) -> None:
        self.visible_edge_types = set(EDGE_TYPES)
        self.depth = 1
        self.camera = CameraTransform()

