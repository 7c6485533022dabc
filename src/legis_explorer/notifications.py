"""Notification messages published by exploration flows.

A single NotificationChannel carries progress, outcome and error messages for
every flow, plus selection details for the node panel.
"""

import logging
from typing import Any, Callable, Literal
from urllib.parse import quote

from pydantic import BaseModel

from .models import GraphNode

logger = logging.getLogger(__name__)


class NodeDetail(BaseModel):
    """Fields shown in the node detail panel."""
    id: str
    label: str
    level: str = "unknown"
    status: str = "unknown"
    legislation_type: str | None = None
    source_identifier: str | None = None
    date: str | None = None
    sponsors: list[str] = []
    topics: list[str] = []
    detail_path: str

    @classmethod
    def from_node(cls, node: GraphNode) -> "NodeDetail":
        metadata: dict[str, Any] = node.metadata or {}
        return cls(
            id=node.id,
            label=node.label,
            level=node.level.kind if node.level else "unknown",
            status=node.status.kind if node.status else "unknown",
            legislation_type=metadata.get("legislation_type") or None,
            source_identifier=metadata.get("source_identifier") or None,
            date=node.date,
            sponsors=[str(s) for s in metadata.get("sponsors") or []],
            topics=[str(t) for t in metadata.get("topics") or []],
            detail_path=f"/legislation/{quote(node.id, safe='')}",
        )


class ProgressMessage(BaseModel):
    """A flow has started and is waiting on the server."""
    type: Literal["progress"] = "progress"
    flow: str
    message: str


class ResultMessage(BaseModel):
    """A flow completed (including benign outcomes like "No results found")."""
    type: Literal["result"] = "result"
    flow: str
    message: str


class ErrorMessage(BaseModel):
    """A flow failed; the graph was left untouched."""
    type: Literal["error"] = "error"
    flow: str
    message: str
    code: str | None = None  # Error kind, e.g. "NetworkError"
    status: int | None = None  # HTTP status when there was one


class NodeSelectedMessage(BaseModel):
    type: Literal["node_selected"] = "node_selected"
    node: NodeDetail


class NodeDeselectedMessage(BaseModel):
    type: Literal["node_deselected"] = "node_deselected"


OutgoingMessage = (
    ProgressMessage
    | ResultMessage
    | ErrorMessage
    | NodeSelectedMessage
    | NodeDeselectedMessage
)

Subscriber = Callable[[OutgoingMessage], None]


# Flow name to progress text
FLOW_STATUS_MESSAGES = {
    "load_neighborhood": "Loading node...",
    "expand": "Expanding...",
    "find_path": "Finding path...",
    "load_cluster": "Loading cluster...",
    "search": "Searching...",
    "save_exploration": "Saving...",
    "load_exploration": "Loading exploration...",
    "delete_exploration": "Deleting...",
    "list_explorations": "Loading...",
}


class NotificationChannel:
    """Fan-out of flow messages to subscribers, with a bounded history."""

    def __init__(self, history_size: int = 50):
        self._subscribers: list[Subscriber] = []
        self._history: list[OutgoingMessage] = []
        self._history_size = history_size

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def publish(self, message: OutgoingMessage) -> None:
        self._history.append(message)
        del self._history[:-self._history_size]
        for subscriber in list(self._subscribers):
            try:
                subscriber(message)
            except Exception:
                logger.exception("Notification subscriber failed on %s", message.type)

    @property
    def history(self) -> list[OutgoingMessage]:
        return list(self._history)

    @property
    def last(self) -> OutgoingMessage | None:
        return self._history[-1] if self._history else None

    def progress(self, flow: str, message: str | None = None) -> None:
        self.publish(ProgressMessage(flow=flow, message=message or FLOW_STATUS_MESSAGES.get(flow, "Working...")))

    def result(self, flow: str, message: str) -> None:
        self.publish(ResultMessage(flow=flow, message=message))

    def error(self, flow: str, message: str, code: str | None = None, status: int | None = None) -> None:
        self.publish(ErrorMessage(flow=flow, message=message, code=code, status=status))
