from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from fleet_repairs.services.dashboard import (
    format_repair_time,
    issue_activity,
    melbourne_day_start,
    merge_activities,
    workshop_capacity,
)


def test_capacity():
    assert workshop_capacity(0) == 0
    assert workshop_capacity(5) == 50
    assert workshop_capacity(95) == 95


def test_repair_time_format():
    assert format_repair_time([]) == "N/A"
    assert format_repair_time([0.5]) == "30m"
    assert format_repair_time([2, 3]) == "2.5h"


def test_melbourne_day_start():
    # 09:30 on 4 Feb in Melbourne (AEDT, UTC+11)
    now = datetime(2025, 2, 3, 22, 30, tzinfo=timezone.utc)
    assert melbourne_day_start(now) == datetime(2025, 2, 3, 13, 0, tzinfo=timezone.utc)


def _issue(id_, status, hours_ago):
    at = datetime(2025, 2, 3, 22, 30, tzinfo=timezone.utc) - timedelta(hours=hours_ago)
    return SimpleNamespace(id=id_, status=status, category="Brakes", fleet_number="412", severity="HIGH",
                           created_at=at, updated_at=at)


def test_issue_activity_shape():
    activity = issue_activity(_issue(1, "COMPLETED", 0))
    assert activity["type"] == "issue_completed"
    assert activity["title"] == "Brakes repair completed"
    assert activity["timestamp"] == "4 Feb, 09:30"
    assert activity["priority"] == "high"


def test_merge_activities_caps_and_strips_sort_key():
    activities = [issue_activity(_issue(i, "PENDING", i)) for i in range(10)]
    merged = merge_activities(activities[5:], activities[:5])
    assert len(merged) == 6
    assert [a["id"] for a in merged] == [f"issue-{i}" for i in range(6)]
    assert all("_at" not in a for a in merged)
