# fleet_repairs/services/feed.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo

from fleet_repairs.utils.parsing import as_utc

MELBOURNE = ZoneInfo("Australia/Melbourne")

MIN_LIMIT = 1
MAX_LIMIT = 50
DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class FeedItem:
    id: str
    type: str
    ticket: int
    fleet_number: str
    message: str
    author: Optional[str]
    author_role: Optional[str]
    timestamp: datetime
    severity: str
    status: str

    def to_dict(self):
        return {
            "id": self.id,
            "type": self.type,
            "ticket": self.ticket,
            "fleetNumber": self.fleet_number,
            "message": self.message,
            "author": self.author,
            "authorRole": self.author_role,
            "timestamp": as_utc(self.timestamp).isoformat(),
            "severity": self.severity,
            "status": self.status,
        }


def parse_limit(raw) -> int:
    """Raises ValueError unless raw is empty or an integer in [1, 50]."""
    if raw is None or str(raw).strip() == "":
        return DEFAULT_LIMIT
    limit = int(str(raw).strip())
    if limit < MIN_LIMIT or limit > MAX_LIMIT:
        raise ValueError(f"limit must be between {MIN_LIMIT} and {MAX_LIMIT}")
    return limit


def format_schedule_time(value: datetime) -> str:
    """e.g. 'Tue 4 Feb, 09:30' in Melbourne time."""
    local = as_utc(value).astimezone(MELBOURNE)
    return f"{local:%a} {local.day} {local:%b}, {local:%H:%M}"


def comment_item(comment) -> FeedItem:
    issue = comment.issue
    author = comment.author
    return FeedItem(
        id=f"comment-{comment.id}",
        type="comment",
        ticket=issue.ticket,
        fleet_number=issue.fleet_number,
        message=comment.body,
        author=author.name if author else "Staff",
        author_role=author.role if author else comment.author_role,
        timestamp=comment.created_at,
        severity=issue.severity,
        status=issue.status,
    )


def work_order_item(work_order) -> FeedItem:
    issue = work_order.issue
    assignee = work_order.assigned_to
    if assignee:
        message = f"{assignee.name} has been assigned to handle this repair"
    else:
        message = f"Scheduled for {format_schedule_time(work_order.start_at)}"
    return FeedItem(
        id=f"workorder-{work_order.id}",
        type="assignment" if assignee else "schedule",
        ticket=issue.ticket,
        fleet_number=issue.fleet_number,
        message=message,
        author=assignee.name if assignee else None,
        author_role=assignee.role if assignee else None,
        timestamp=work_order.created_at,
        severity=issue.severity,
        status=work_order.status,
    )


def merge_feed(*streams: Iterable[FeedItem], limit: int) -> List[FeedItem]:
    """Merge item streams newest first and keep the top `limit`."""
    merged = [item for stream in streams for item in stream]
    merged.sort(key=lambda item: as_utc(item.timestamp), reverse=True)
    return merged[:limit]
