# fleet_repairs/services/events.py
import json
import logging
import queue
import threading
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def sse_message(payload: dict) -> str:
    return f"data: {json.dumps(payload, default=str)}\n\n"


def _stamp(payload: dict) -> dict:
    stamped = dict(payload)
    stamped.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return stamped


class EventBroker:
    """Fan-out of server-sent events to every connected subscriber."""

    def __init__(self, max_queue=50):
        self._subscribers = set()
        self._lock = threading.Lock()
        self._max_queue = max_queue

    def subscribe(self):
        q = queue.Queue(maxsize=self._max_queue)
        with self._lock:
            self._subscribers.add(q)
        return q

    def unsubscribe(self, q):
        with self._lock:
            self._subscribers.discard(q)

    @property
    def subscriber_count(self):
        with self._lock:
            return len(self._subscribers)

    def publish(self, payload: dict) -> int:
        """Queue an encoded message for each subscriber; slow clients drop updates."""
        encoded = sse_message(_stamp(payload))
        with self._lock:
            subscribers = list(self._subscribers)
        delivered = 0
        for q in subscribers:
            try:
                q.put_nowait(encoded)
                delivered += 1
            except queue.Full:
                logger.warning("Dropping event for slow subscriber")
        return delivered

    def stream(self, q, heartbeat_seconds=30):
        """Generator for a text/event-stream response body."""
        try:
            yield sse_message(_stamp({"type": "connected"}))
            while True:
                try:
                    yield q.get(timeout=heartbeat_seconds)
                except queue.Empty:
                    yield sse_message(_stamp({"type": "heartbeat"}))
        finally:
            self.unsubscribe(q)


broker = EventBroker()


def broadcast_update(data: dict) -> int:
    logger.info("Broadcasting update: %s", data.get("type"))
    return broker.publish(data)
