# fleet_repairs/routes/events.py
from flask import Blueprint, Response, current_app, stream_with_context

from fleet_repairs.services.events import broker

events_bp = Blueprint("events", __name__)


# -----------------------------------------------------------------------------
# GET /api/events
# Server-sent events: "connected", then broadcasts and heartbeats.
# -----------------------------------------------------------------------------
@events_bp.get("/api/events")
def events():
    q = broker.subscribe()
    heartbeat = current_app.config.get("EVENTS_HEARTBEAT_SECONDS", 30)
    current_app.logger.info("Event stream opened (%d subscribers)", broker.subscriber_count)
    return Response(
        stream_with_context(broker.stream(q, heartbeat)),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
