from datetime import timedelta

from fleet_repairs.db_models import db, Comment, Media, WorkOrder
from fleet_repairs.utils.parsing import utcnow


def test_fleet_history_timeline(ops_client, make_issue):
    now = utcnow()
    old = make_issue(fleet_number="412", category="Engine", status="COMPLETED",
                     created_at=now - timedelta(days=10), updated_at=now - timedelta(days=9))
    recent = make_issue(fleet_number="412", severity="CRITICAL", created_at=now - timedelta(days=1))
    make_issue(fleet_number="301")
    db.session.add_all([
        Comment(issue_id=recent.id, author_role="WORKSHOP", body="Towing arranged", created_at=now),
        WorkOrder(issue_id=recent.id, start_at=now, end_at=now, workshop_site="Sydney", work_type="Brake Repair",
                  created_at=now - timedelta(hours=12)),
        Media(issue_id=recent.id, url="/uploads/x.jpg", type="image"),
    ])
    db.session.commit()

    data = ops_client.get("/api/fleet/412/history").get_json()
    assert data["fleetNumber"] == "412"
    assert [e["type"] for e in data["timeline"]] == [
        "comment", "work_order", "issue_created", "completed", "issue_created",
    ]
    assert data["timeline"][1]["title"] == "Work Order: Brake Repair"

    stats = data["stats"]
    assert stats["totalIssues"] == 2
    assert stats["completedRepairs"] == 1
    assert stats["criticalIssues"] == 1
    assert stats["categories"] == ["Brakes", "Engine"]
    assert stats["firstIssueDate"].startswith(old.created_at.date().isoformat())

    assert [i["mediaCount"] for i in data["issues"]] == [1, 0]


def test_unknown_fleet_has_empty_history(ops_client):
    data = ops_client.get("/api/fleet/999/history").get_json()
    assert data["timeline"] == []
    assert data["stats"]["firstIssueDate"] is None


def test_utilization(ops_client):
    data = ops_client.get("/api/fleet/412/utilization").get_json()
    assert data["utilization"] == 92
    assert data["category"] == "EXPRESS"


def test_fleet_endpoints_are_staff_only(client):
    assert client.get("/api/fleet/412/history").status_code == 401
    assert client.get("/api/fleet/412/utilization").status_code == 401
