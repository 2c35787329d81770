from fleet_repairs.extensions import mail


def test_send_email(ops_client):
    with mail.record_messages() as outbox:
        resp = ops_client.post("/api/notifications/email", json={
            "recipients": ["a@example.com", "b@example.com"],
            "subject": "Truck 412 off road",
            "message": "Towing arranged",
            "priority": "HIGH",
        })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["message"] == "Email notification sent"
    assert data["recipients"] == 2
    assert outbox[0].subject == "[HIGH] Truck 412 off road"


def test_email_validation(ops_client):
    resp = ops_client.post("/api/notifications/email", json={
        "recipients": ["nope"], "subject": "", "priority": "URGENT",
    })
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "Invalid email data"
    assert {d["field"] for d in body["details"]} == {"recipients", "subject", "message", "priority"}


def test_empty_recipient_list_is_rejected(ops_client):
    with mail.record_messages() as outbox:
        resp = ops_client.post("/api/notifications/email", json={
            "recipients": [], "subject": "Truck 412 off road", "message": "Towing arranged",
        })
    assert resp.status_code == 400
    assert resp.get_json()["details"] == [
        {"field": "recipients", "message": "at least one recipient is required"},
    ]
    assert outbox == []
    resp = ops_client.post("/api/notifications/sms", json={"recipients": [], "message": "Ready"})
    assert resp.status_code == 400


def test_send_sms(ops_client):
    resp = ops_client.post("/api/notifications/sms", json={"recipients": ["0412345678"], "message": "Ready"})
    assert resp.status_code == 200
    assert resp.get_json()["message"] == "SMS notification sent"


def test_sms_length_limit(ops_client):
    resp = ops_client.post("/api/notifications/sms", json={"recipients": ["0412345678"], "message": "x" * 161})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid SMS data"


def test_notifications_are_staff_only(client):
    assert client.post("/api/notifications/sms", json={}).status_code == 401
