from datetime import timedelta

from fleet_repairs.db_models import db, EquipmentRequest, Mapping, WorkOrder
from fleet_repairs.extensions import mail
from fleet_repairs.utils.parsing import utcnow


def _work_order(issue, **kw):
    now = utcnow()
    return WorkOrder(issue_id=issue.id, start_at=now, end_at=now, workshop_site="Melbourne", **kw)


def test_repair_time_from_history(client, make_issue):
    now = utcnow()
    make_issue(category="Brakes", severity="HIGH", status="COMPLETED", fleet_number="412",
               created_at=now - timedelta(hours=3), updated_at=now)
    make_issue(category="Brakes", severity="LOW", status="COMPLETED",
               created_at=now - timedelta(hours=9), updated_at=now)

    data = client.get("/api/analytics/repair-time?category=Brakes&severity=high").get_json()
    assert data["source"] == "history"
    assert data["averageHours"] == 3.0
    assert data["sampleSize"] == 1
    assert "lastUpdated" in data
    assert "fleetNumber" not in data

    scoped = client.get("/api/analytics/repair-time?category=Brakes&severity=HIGH&fleetNumber=301").get_json()
    assert scoped["fleetNumber"] == "301"
    assert scoped["source"] == "baseline"


def test_repair_time_defaults_and_validation(client):
    data = client.get("/api/analytics/repair-time").get_json()
    assert (data["category"], data["severity"], data["averageHours"]) == ("Other", "MEDIUM", 2.0)

    resp = client.get("/api/analytics/repair-time?severity=huge&days=0")
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "Invalid query parameters"
    assert {d["field"] for d in body["details"]} == {"severity", "days"}


def test_inventory_by_category(client):
    data = client.get("/api/inventory/check?category=Transmission").get_json()
    assert data["available"] is False
    assert data["supplier"] == "Allison Transmission"
    tyres = client.get("/api/inventory/check?category=Tyres").get_json()
    assert tyres["category"] == "Tires"
    assert tyres["supplier"] == "Bridgestone Commercial"


def test_inventory_unknown_category_falls_through(client):
    resp = client.get("/api/inventory/check?category=Hovercraft")
    assert resp.status_code == 200
    assert resp.get_json()["overallStock"] == 85
    data = client.get("/api/inventory/check?category=Hovercraft&fleetNumber=412").get_json()
    assert data["priorityLevel"] == "HIGH"
    data = client.get("/api/inventory/check?category=Hovercraft&partNumber=NOPE").get_json()
    assert data["orderRequired"] is True


def test_inventory_by_part_number(client, make_issue):
    now = utcnow()
    db.session.add_all([
        EquipmentRequest(item_name="Brake pads", reason="stock", part_number="BP-100", quantity=3,
                         status="RECEIVED", supplier="Bendix", received_at=now),
        EquipmentRequest(item_name="Brake pads", reason="stock", part_number="BP-100", quantity=5,
                         status="ORDERED"),
        EquipmentRequest(item_name="Brake pads", reason="stock", part_number="BP-100", quantity=2,
                         status="PENDING"),
    ])
    db.session.commit()

    data = client.get("/api/inventory/check?partNumber=BP-100").get_json()
    assert data["stock"] == 3
    assert data["onOrder"] == 1
    assert data["available"] is True
    assert data["supplier"] == "Bendix"
    assert data["orderRequired"] is False

    missing = client.get("/api/inventory/check?partNumber=NOPE").get_json()
    assert missing["available"] is False
    assert missing["orderRequired"] is True


def test_inventory_by_fleet_and_general(client):
    assert client.get("/api/inventory/check?fleetNumber=412").get_json()["priorityLevel"] == "HIGH"
    assert client.get("/api/inventory/check").get_json()["overallStock"] == 85


def test_metrics(ops_client, make_issue):
    now = utcnow()
    once = make_issue(status="COMPLETED", fleet_number="412", created_at=now - timedelta(hours=4), updated_at=now)
    twice = make_issue(status="COMPLETED", fleet_number="301", created_at=now - timedelta(hours=4), updated_at=now)
    make_issue(severity="CRITICAL", fleet_number="412")
    db.session.add_all([
        _work_order(once),
        _work_order(twice),
        _work_order(twice),
        Mapping(kind="fleet", key="500", value="{}"),
    ])
    db.session.commit()

    data = ops_client.get("/api/metrics").get_json()
    assert data["overview"] == {
        "totalIssues": 3,
        "resolvedIssues": 2,
        "criticalIssues": 1,
        "resolutionRate": 66.7,
        "criticalRate": 33.3,
    }
    assert data["trends"]["issuesLast7Days"] == 3
    assert data["performance"] == {
        "avgResolutionTimeHours": 4.0,
        "responseTimeCount": 2,
        "firstTimeFixRate": 50.0,
        "fleetAvailability": 66.7,
    }
    assert data["insights"]["topCategories"] == [{"category": "Brakes", "count": 3}]
    assert data["insights"]["problematicFleets"][0] == {"fleetNumber": "412", "issueCount": 2}


def test_empty_metrics(ops_client):
    data = ops_client.get("/api/metrics").get_json()
    assert data["overview"]["resolutionRate"] == 0
    assert data["performance"]["fleetAvailability"] == 0


def test_report_summary(ops_client, make_issue):
    make_issue(severity="CRITICAL")
    make_issue(status="COMPLETED", created_at=utcnow() - timedelta(hours=2))

    data = ops_client.get("/api/reports/summary").get_json()
    assert data["period"] == "weekly"
    assert data["overview"]["totalIssues"] == 2
    assert data["bySeverity"]["critical"] == 1
    assert len(data["dailyBreakdown"]) == 7

    daily = ops_client.get("/api/reports/summary?period=daily").get_json()
    assert daily["period"] == "daily"


def test_report_summary_validation(ops_client):
    resp = ops_client.get("/api/reports/summary?period=yearly&startDate=soon")
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "Invalid parameters"
    assert {d["field"] for d in body["details"]} == {"period", "startDate"}

    resp = ops_client.get("/api/reports/summary?startDate=2025-02-01&endDate=2025-01-01")
    assert resp.status_code == 400


def test_send_report(ops_client, make_issue):
    make_issue()
    with mail.record_messages() as outbox:
        resp = ops_client.post("/api/reports/summary", json={"period": "monthly", "recipients": ["boss@example.com"]})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["message"] == "monthly summary report sent successfully"
    assert data["sentTo"] == ["boss@example.com"]
    assert data["summary"]["overview"]["totalIssues"] == 1

    assert len(outbox) == 1
    assert outbox[0].subject == "SE Repairs Monthly Summary Report"
    assert outbox[0].body.startswith("SE REPAIRS MONTHLY SUMMARY REPORT")


def test_send_report_default_recipients(ops_client, test_app):
    with mail.record_messages() as outbox:
        data = ops_client.post("/api/reports/summary", json={"period": "daily"}).get_json()
    assert data["sentTo"] == test_app.config["REPORT_RECIPIENTS"]
    assert outbox[0].recipients == test_app.config["REPORT_RECIPIENTS"]


def test_send_report_validation(ops_client):
    resp = ops_client.post("/api/reports/summary", json={"period": "weekly", "recipients": ["not-an-email"]})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Invalid parameters"}
    assert ops_client.post("/api/reports/summary", json={"period": "hourly"}).status_code == 400
