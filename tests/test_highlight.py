"""Tests for path and selection highlight sets."""

from legis_explorer.graph import PathHighlighter


def test_highlight_marks_nodes_and_edges(make_node, make_edge):
    highlighter = PathHighlighter()
    highlighter.highlight_path(
        [make_node("A"), make_node("B"), make_node("C")],
        [make_edge("A", "B"), make_edge("C", "B", "amends")],
    )

    assert highlighter.path_node_ids == {"A", "B", "C"}
    assert highlighter.is_edge_highlighted(make_edge("B", "A", "supersedes"))
    assert highlighter.is_pair_highlighted("B", "C")
    assert not highlighter.is_pair_highlighted("A", "C")


def test_new_path_replaces_previous(make_node, make_edge):
    highlighter = PathHighlighter()
    highlighter.highlight_path([make_node("A"), make_node("B")], [make_edge("A", "B")])
    highlighter.highlight_path([make_node("C"), make_node("D")], [make_edge("C", "D")])

    assert highlighter.path_node_ids == {"C", "D"}
    assert not highlighter.is_pair_highlighted("A", "B")


def test_path_and_selection_are_independent(make_node, make_edge):
    highlighter = PathHighlighter()
    highlighter.select("X")
    highlighter.highlight_path([make_node("A"), make_node("B")], [make_edge("A", "B")])
    assert highlighter.selected_node_id == "X"

    highlighter.clear_path()
    assert highlighter.selected_node_id == "X"

    highlighter.highlight_path([make_node("A")], [])
    highlighter.deselect()
    assert highlighter.is_node_highlighted("A")


def test_clear_empties_both_sets(make_node, make_edge):
    highlighter = PathHighlighter()
    highlighter.select("A")
    highlighter.highlight_path([make_node("A"), make_node("B")], [make_edge("A", "B")])

    highlighter.clear()

    assert highlighter.selected_node_id is None
    assert highlighter.path_node_ids == frozenset()
    assert highlighter.path_edge_keys == frozenset()


def test_clear_leaves_node_attributes_alone(store, make_node, make_edge):
    store.merge([make_node("A"), make_node("B")], [make_edge("A", "B")])
    before = {n.id: n.model_dump() for n in store.nodes}

    store.highlights.highlight_path(store.nodes, store.edges)
    store.highlights.clear()

    assert {n.id: n.model_dump() for n in store.nodes} == before
