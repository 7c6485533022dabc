"""Transient highlight sets: the found path and the current selection."""

from typing import Iterable

from ..models import Edge, Node, undirected_key


class PathHighlighter:
    """Tracks path highlights and the selected node as independent sets.

    Path edges are stored by undirected key so a highlight matches an edge
    whichever direction the path traversed it.
    """

    def __init__(self):
        self._path_nodes: set[str] = set()
        self._path_edges: set[tuple[str, str]] = set()
        self._selected_node_id: str | None = None

    # ------------------------------------------------------------------
    # Path
    # ------------------------------------------------------------------

    def highlight_path(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        self.clear_path()
        for node in nodes:
            self._path_nodes.add(node.id)
        for edge in edges:
            self._path_edges.add(edge.undirected_key)

    def clear_path(self) -> None:
        self._path_nodes.clear()
        self._path_edges.clear()

    def is_node_highlighted(self, node_id: str) -> bool:
        return node_id in self._path_nodes

    def is_edge_highlighted(self, edge: Edge) -> bool:
        return edge.undirected_key in self._path_edges

    def is_pair_highlighted(self, a: str, b: str) -> bool:
        return undirected_key(a, b) in self._path_edges

    @property
    def path_node_ids(self) -> frozenset[str]:
        return frozenset(self._path_nodes)

    @property
    def path_edge_keys(self) -> frozenset[tuple[str, str]]:
        return frozenset(self._path_edges)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selected_node_id(self) -> str | None:
        return self._selected_node_id

    def select(self, node_id: str) -> None:
        self._selected_node_id = node_id

    def deselect(self) -> None:
        self._selected_node_id = None

    def is_selected(self, node_id: str) -> bool:
        return node_id == self._selected_node_id

    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Empty both the path set and the selection."""
        self.clear_path()
        self.deselect()
