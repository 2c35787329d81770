# fleet_repairs/services/dashboard.py
from datetime import datetime
from typing import List, Optional

from fleet_repairs.services.feed import MELBOURNE
from fleet_repairs.utils.parsing import as_utc

MAX_ACTIVITIES = 6
CAPACITY_HEADROOM = 5


def workshop_capacity(scheduled: int) -> int:
    if scheduled <= 0:
        return 0
    return min(100, round(scheduled / (scheduled + CAPACITY_HEADROOM) * 100))


def format_repair_time(hours: List[float]) -> str:
    """'45m' under an hour, '2.5h' otherwise, 'N/A' with nothing to average."""
    if not hours:
        return "N/A"
    avg = sum(hours) / len(hours)
    if avg < 1:
        return f"{round(avg * 60)}m"
    return f"{avg:.1f}h"


def melbourne_day_start(now: datetime) -> datetime:
    """Midnight in Melbourne, expressed in UTC."""
    local = as_utc(now).astimezone(MELBOURNE)
    return as_utc(local.replace(hour=0, minute=0, second=0, microsecond=0))


def format_melbourne_short(value: Optional[datetime]) -> Optional[str]:
    """e.g. '4 Feb, 09:30' in Melbourne time."""
    if value is None:
        return None
    local = as_utc(value).astimezone(MELBOURNE)
    return f"{local.day} {local:%b}, {local:%H:%M}"


def issue_activity(issue) -> dict:
    completed = issue.status == "COMPLETED"
    at = issue.updated_at if completed else issue.created_at
    return {
        "id": f"issue-{issue.id}",
        "type": "issue_completed" if completed else "issue_reported",
        "title": f"{issue.category} repair completed" if completed else f"{issue.category} issue reported",
        "description": f"{issue.category} - Truck #{issue.fleet_number}",
        "timestamp": format_melbourne_short(at),
        "priority": (issue.severity or "MEDIUM").lower(),
        "_at": as_utc(at),
    }


def work_order_activity(work_order) -> dict:
    issue = work_order.issue
    return {
        "id": f"wo-{work_order.id}",
        "type": "workorder_created",
        "title": f"{issue.category} scheduled",
        "description": f"{issue.category} - Truck #{issue.fleet_number}",
        "timestamp": format_melbourne_short(work_order.created_at),
        "priority": "medium",
        "_at": as_utc(work_order.created_at),
    }


def merge_activities(*streams) -> List[dict]:
    merged = [a for stream in streams for a in stream]
    merged.sort(key=lambda a: a["_at"], reverse=True)
    out = []
    for activity in merged[:MAX_ACTIVITIES]:
        activity = dict(activity)
        activity.pop("_at")
        out.append(activity)
    return out
