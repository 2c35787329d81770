from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from fleet_repairs.services.feed import (
    FeedItem,
    comment_item,
    format_schedule_time,
    merge_feed,
    parse_limit,
    work_order_item,
)

NOW = datetime(2025, 2, 3, 22, 30, tzinfo=timezone.utc)  # Tue 4 Feb 09:30 in Melbourne


def _issue():
    return SimpleNamespace(ticket=1042, fleet_number="412", severity="HIGH", status="IN_PROGRESS")


def _item(id_, minutes_ago):
    return FeedItem(id_, "comment", 1, "412", "m", None, None, NOW - timedelta(minutes=minutes_ago), "LOW", "PENDING")


def test_parse_limit_defaults_and_bounds():
    assert parse_limit(None) == 10
    assert parse_limit("") == 10
    assert parse_limit("25") == 25
    for bad in ("0", "51", "abc"):
        with pytest.raises(ValueError):
            parse_limit(bad)


def test_format_schedule_time_in_melbourne():
    assert format_schedule_time(NOW) == "Tue 4 Feb, 09:30"


def test_comment_item_uses_author_or_staff_fallback():
    author = SimpleNamespace(name="Workshop Team", role="WORKSHOP")
    comment = SimpleNamespace(id=7, issue=_issue(), author=author, author_role=None, body="Parts ordered", created_at=NOW)
    item = comment_item(comment)
    assert item.id == "comment-7"
    assert item.author == "Workshop Team"
    assert item.author_role == "WORKSHOP"

    anonymous = SimpleNamespace(id=8, issue=_issue(), author=None, author_role="OPERATIONS", body="On it",
                                created_at=NOW)
    item = comment_item(anonymous)
    assert item.author == "Staff"
    assert item.author_role == "OPERATIONS"


def test_work_order_item_assignment_vs_schedule():
    assignee = SimpleNamespace(name="Dave", role="WORKSHOP")
    assigned = SimpleNamespace(id=3, issue=_issue(), assigned_to=assignee, start_at=NOW, created_at=NOW,
                               status="SCHEDULED")
    item = work_order_item(assigned)
    assert item.type == "assignment"
    assert item.message == "Dave has been assigned to handle this repair"

    unassigned = SimpleNamespace(id=4, issue=_issue(), assigned_to=None, start_at=NOW, created_at=NOW,
                                 status="SCHEDULED")
    item = work_order_item(unassigned)
    assert item.type == "schedule"
    assert item.message == "Scheduled for Tue 4 Feb, 09:30"
    assert item.to_dict()["fleetNumber"] == "412"


def test_merge_feed_orders_newest_first_and_truncates():
    merged = merge_feed([_item("a", 30), _item("b", 5)], [_item("c", 10)], limit=2)
    assert [i.id for i in merged] == ["b", "c"]
