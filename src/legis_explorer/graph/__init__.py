"""
Graph-state engine for the legislative explorer.

GraphStore holds the merged nodes and edges, PathHighlighter the transient
path/selection marks, ViewState the filters and camera, and StateSerializer
converts all of it to and from a saved-exploration snapshot.
"""

from .highlight import PathHighlighter
from .serializer import GraphSnapshot, StateSerializer
from .store import GraphStore, MergeResult, StoreChange
from .view import CameraTransform, ViewState

__all__ = [
    "CameraTransform",
    "GraphSnapshot",
    "GraphStore",
    "MergeResult",
    "PathHighlighter",
    "StateSerializer",
    "StoreChange",
    "ViewState",
]
