"""Interactive explorer for the legislative knowledge graph."""

from .config import Settings, get_settings
from .exploration_client import ExplorationClient
from .graph import GraphSnapshot, GraphStore, PathHighlighter, StateSerializer, ViewState
from .graph_client import GraphApiClient
from .notifications import NotificationChannel
from .orchestrator import ExplorationOrchestrator, FlowResult

__all__ = [
    "ExplorationClient",
    "ExplorationOrchestrator",
    "FlowResult",
    "GraphApiClient",
    "GraphSnapshot",
    "GraphStore",
    "NotificationChannel",
    "PathHighlighter",
    "Settings",
    "StateSerializer",
    "ViewState",
    "get_settings",
]
