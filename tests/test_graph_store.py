"""Tests for GraphStore merge, degree and radius semantics."""

import random

import pytest

from legis_explorer.graph import GraphStore, StoreChange


class TestMerge:

    def test_merge_twice_is_idempotent(self, store, make_node, make_edge):
        """Merging the same pair twice leaves 2 nodes, 1 edge, degree 1 each."""
        nodes = [make_node("A"), make_node("B")]
        edges = [make_edge("A", "B", "references")]

        store.merge(nodes, edges)
        second = store.merge(nodes, edges)

        assert len(store) == 2
        assert len(store.edges) == 1
        assert store.get_node("A").degree == 1
        assert store.get_node("B").degree == 1
        assert second.changed is False
        assert second.dropped_edges == 1

    def test_first_write_wins(self, store, make_node):
        store.merge([make_node("A", label="Original title")], [])
        store.merge([make_node("A", label="Renamed title", status="enacted")], [])

        node = store.get_node("A")
        assert node.label == "Original title"
        assert node.status.kind == "introduced"

    def test_edge_without_endpoint_is_dropped(self, store, make_node, make_edge):
        result = store.merge([make_node("A")], [make_edge("A", "Z")])

        assert store.edges == []
        assert result.dropped_edges == 1
        assert store.get_node("A").degree == 0

    def test_nodes_in_same_merge_precede_edges(self, store, make_node, make_edge):
        """Edges listed before their nodes in one response are still accepted."""
        result = store.merge([make_node("A"), make_node("B")], [make_edge("B", "A", "amends")])
        assert result.added_edges == [("B", "A", "amends")]

    def test_every_accepted_edge_has_both_endpoints(self, store, make_node, make_edge):
        store.merge([make_node("A"), make_node("B")], [make_edge("A", "B"), make_edge("B", "C")])
        store.merge([make_node("C")], [make_edge("C", "D"), make_edge("B", "C")])

        for edge in store.edges:
            assert store.has_node(edge.source)
            assert store.has_node(edge.target)
        assert {e.key for e in store.edges} == {("A", "B", "references"), ("B", "C", "references")}

    def test_multigraph_keeps_distinct_types(self, store, make_node, make_edge):
        store.merge(
            [make_node("A"), make_node("B")],
            [make_edge("A", "B", "references"), make_edge("A", "B", "amends"), make_edge("B", "A", "references")],
        )

        assert len(store.edges) == 3
        assert store.get_node("A").degree == 3
        assert store.get_node("B").degree == 3

    def test_new_nodes_seeded_near_viewport_center(self, make_node):
        store = GraphStore(viewport=(1000.0, 600.0), rng=random.Random(7))
        store.merge([make_node(str(i)) for i in range(20)], [])

        for node in store.nodes:
            assert 450.0 <= node.x <= 550.0
            assert 250.0 <= node.y <= 350.0

    def test_insertion_order_preserved(self, store, make_node):
        store.merge([make_node("C"), make_node("A")], [])
        store.merge([make_node("B"), make_node("A")], [])
        assert [n.id for n in store.nodes] == ["C", "A", "B"]


class TestDegrees:

    def test_degree_matches_touching_edges(self, store, make_node, make_edge):
        store.merge(
            [make_node(n) for n in "ABCD"],
            [
                make_edge("A", "B"),
                make_edge("A", "C", "implements"),
                make_edge("D", "A", "supersedes"),
                make_edge("C", "C", "similar_to"),
            ],
        )
        store.compute_degrees()

        for node in store.nodes:
            touches = sum((e.source == node.id) + (e.target == node.id) for e in store.edges)
            assert node.degree == touches
        assert store.max_degree == 3

    def test_max_degree_floor_is_one(self, store, make_node):
        store.merge([make_node("A")], [])
        assert store.max_degree == 1

    def test_edges_touching(self, store, make_node, make_edge):
        store.merge([make_node(n) for n in "ABC"], [make_edge("A", "B"), make_edge("C", "B", "delegates")])
        assert len(store.edges_touching("B")) == 2
        assert len(store.edges_touching("A")) == 1


class TestRadius:

    def test_isolated_node_gets_minimum(self, store, make_node):
        store.merge([make_node("A")], [])
        assert store.radius(store.get_node("A")) == pytest.approx(6.0)

    def test_busiest_node_gets_maximum(self, store, make_node, make_edge):
        store.merge([make_node(n) for n in "ABC"], [make_edge("A", "B"), make_edge("A", "C")])
        assert store.radius(store.get_node("A")) == pytest.approx(24.0)
        assert store.radius(store.get_node("B")) == pytest.approx(15.0)

    def test_monotonic_and_bounded(self, make_node, make_edge):
        store = GraphStore(radius_range=(6.0, 24.0), rng=random.Random(0))
        hub_edges = [make_edge("hub", f"n{i}") for i in range(10)]
        chain_edges = [make_edge(f"n{i}", f"n{i + 1}", "amends") for i in range(5)]
        store.merge(
            [make_node("hub"), *[make_node(f"n{i}") for i in range(11)]],
            hub_edges + chain_edges,
        )

        by_degree = sorted(store.nodes, key=lambda n: n.degree)
        radii = [store.radius(n) for n in by_degree]
        assert radii == sorted(radii)
        assert all(6.0 <= r <= 24.0 for r in radii)


class TestResetAndNotifications:

    def test_reset_clears_everything(self, store, make_node, make_edge):
        store.merge([make_node("A"), make_node("B")], [make_edge("A", "B")])
        store.highlights.highlight_path([make_node("A")], [make_edge("A", "B")])
        store.highlights.select("A")

        store.reset()

        assert len(store) == 0
        assert store.edges == []
        assert store.max_degree == 1
        assert store.highlights.selected_node_id is None
        assert store.highlights.path_node_ids == frozenset()
        assert store.highlights.path_edge_keys == frozenset()

    def test_reset_allows_same_edges_again(self, store, make_node, make_edge):
        store.merge([make_node("A"), make_node("B")], [make_edge("A", "B")])
        store.reset()
        result = store.merge([make_node("A"), make_node("B")], [make_edge("A", "B")])
        assert len(result.added_edges) == 1

    def test_subscribers_see_merges_and_resets(self, store, make_node):
        events: list[StoreChange] = []
        unsubscribe = store.subscribe(events.append)

        store.merge([make_node("A")], [])
        store.reset()
        unsubscribe()
        store.merge([make_node("B")], [])

        assert [e.kind for e in events] == ["merge", "reset"]
        assert events[0].merge.added_nodes == ["A"]

    def test_failing_subscriber_does_not_abort_merge(self, store, make_node):
        def broken(change):
            raise RuntimeError("render adapter crashed")

        store.subscribe(broken)
        store.merge([make_node("A")], [])

        assert store.has_node("A")


class TestPositions:

    def test_pin_and_unpin(self, store, make_node):
        store.merge([make_node("A")], [])

        store.pin("A", 10.0, 20.0)
        assert store.get_node("A").pinned
        assert store.positions()["A"]["fx"] == 10.0

        store.unpin("A")
        assert not store.get_node("A").pinned

    def test_set_position(self, store, make_node):
        store.merge([make_node("A")], [])
        store.set_position("A", 1.5, -2.5)
        assert (store.get_node("A").x, store.get_node("A").y) == (1.5, -2.5)

    def test_unknown_node_raises(self, store):
        with pytest.raises(KeyError):
            store.pin("missing", 0.0, 0.0)
