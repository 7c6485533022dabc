"""Tests for the notification channel and node detail extraction."""

from legis_explorer.graph import GraphStore
from legis_explorer.notifications import (
    NodeDetail,
    NotificationChannel,
    ProgressMessage,
    ResultMessage,
)


def test_subscribers_receive_messages_in_order():
    channel = NotificationChannel()
    received = []
    unsubscribe = channel.subscribe(received.append)

    channel.progress("expand")
    channel.result("expand", "Added 3 nodes")
    unsubscribe()
    channel.result("expand", "Added 1 nodes")

    assert received == [
        ProgressMessage(flow="expand", message="Expanding..."),
        ResultMessage(flow="expand", message="Added 3 nodes"),
    ]
    assert len(channel.history) == 3


def test_history_is_bounded():
    channel = NotificationChannel(history_size=3)
    for i in range(10):
        channel.result("search", f"message {i}")

    assert [m.message for m in channel.history] == ["message 7", "message 8", "message 9"]
    assert channel.last.message == "message 9"


def test_failing_subscriber_does_not_block_others():
    channel = NotificationChannel()
    received = []

    def broken(message):
        raise RuntimeError("widget gone")

    channel.subscribe(broken)
    channel.subscribe(received.append)
    channel.error("find_path", "Path error: API error: 500", code="NetworkError", status=500)

    assert received[0].status == 500


def test_node_detail_from_node(make_node):
    store = GraphStore()
    store.merge([make_node(
        "hr-1",
        label="Clean Water Act",
        level={"kind": "federal"},
        status={"kind": "enacted"},
        date="1972-10-18",
        metadata={
            "sponsors": ["Sen. Muskie"],
            "topics": ["environment", "water"],
            "source_identifier": "S.2770",
            "legislation_type": "bill",
        },
    )], [])

    detail = NodeDetail.from_node(store.get_node("hr-1"))

    assert detail.level == "federal"
    assert detail.status == "enacted"
    assert detail.source_identifier == "S.2770"
    assert detail.topics == ["environment", "water"]
    assert detail.detail_path == "/legislation/hr-1"


def test_node_detail_defaults(make_node):
    store = GraphStore()
    store.merge([make_node("x", level=None, status=None)], [])

    detail = NodeDetail.from_node(store.get_node("x"))

    assert detail.level == "unknown"
    assert detail.status == "unknown"
    assert detail.sponsors == []
    assert detail.legislation_type is None


def test_node_detail_path_is_encoded(make_node):
    store = GraphStore()
    store.merge([make_node("us/hr 1?x")], [])

    detail = NodeDetail.from_node(store.get_node("us/hr 1?x"))

    assert detail.detail_path == "/legislation/us%2Fhr%201%3Fx"
