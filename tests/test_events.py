import json

from fleet_repairs.services.events import EventBroker, broadcast_update, broker, sse_message


def _decode(message):
    assert message.startswith("data: ") and message.endswith("\n\n")
    return json.loads(message[len("data: "):])


def test_sse_message_format():
    assert sse_message({"type": "x"}) == 'data: {"type": "x"}\n\n'


def test_publish_fans_out_to_subscribers():
    events = EventBroker()
    a, b = events.subscribe(), events.subscribe()
    assert events.publish({"type": "issue_created"}) == 2
    payload = _decode(a.get_nowait())
    assert payload["type"] == "issue_created"
    assert "timestamp" in payload
    assert _decode(b.get_nowait())["type"] == "issue_created"


def test_full_queue_drops_updates():
    events = EventBroker(max_queue=1)
    q = events.subscribe()
    assert events.publish({"type": "one"}) == 1
    assert events.publish({"type": "two"}) == 0
    assert _decode(q.get_nowait())["type"] == "one"


def test_stream_sends_connected_then_heartbeat_and_unsubscribes():
    events = EventBroker()
    q = events.subscribe()
    stream = events.stream(q, heartbeat_seconds=0.01)
    assert _decode(next(stream))["type"] == "connected"
    assert _decode(next(stream))["type"] == "heartbeat"
    events.publish({"type": "work_order_created"})
    assert _decode(next(stream))["type"] == "work_order_created"
    stream.close()
    assert events.subscriber_count == 0


def test_broadcast_update_uses_shared_broker():
    q = broker.subscribe()
    try:
        broadcast_update({"type": "issue_updated", "ticket": 7})
        assert _decode(q.get_nowait())["ticket"] == 7
    finally:
        broker.unsubscribe(q)
