from fleet_repairs.db_models import db, MaintenanceSchedule


def _schedule(**kw):
    body = {
        "fleetNumber": "412",
        "title": "Oil change",
        "scheduledAt": "2025-01-31T09:00:00Z",
        "type": "preventive",
        "estimatedHours": 2,
        "tasks": [{"name": "Drain oil"}, {"name": "Replace filter", "description": "OEM only"}],
    }
    body.update(kw)
    return body


def test_create_schedule_with_tasks(workshop_client):
    resp = workshop_client.post("/api/maintenance", json=_schedule())
    assert resp.status_code == 201
    schedule = resp.get_json()["schedule"]
    assert schedule["status"] == "SCHEDULED"
    assert schedule["type"] == "PREVENTIVE"
    assert schedule["priority"] == "MEDIUM"
    assert schedule["recurring"] is False
    assert [t["name"] for t in schedule["tasks"]] == ["Drain oil", "Replace filter"]


def test_create_recurring_sets_next_date(workshop_client):
    resp = workshop_client.post("/api/maintenance", json=_schedule(recurring=True, recurringInterval="monthly"))
    schedule = resp.get_json()["schedule"]
    assert schedule["recurringNextDate"].startswith("2025-02-28T09:00:00")


def test_create_validation(workshop_client):
    resp = workshop_client.post("/api/maintenance", json={
        "fleetNumber": "412", "type": "weird", "recurringInterval": "hourly", "cost": -5, "tasks": [{}],
    })
    assert resp.status_code == 400
    fields = {d["field"] for d in resp.get_json()["details"]}
    assert fields == {"title", "scheduledAt", "type", "recurringInterval", "cost", "tasks[0].name"}


def test_completing_recurring_schedule_books_next(workshop_client):
    created = workshop_client.post(
        "/api/maintenance", json=_schedule(recurring=True, recurringInterval="monthly")
    ).get_json()["schedule"]

    resp = workshop_client.put(f"/api/maintenance/{created['id']}", json={"status": "completed", "actualHours": 2.5})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["schedule"]["status"] == "COMPLETED"
    assert data["schedule"]["completedAt"] is not None

    nxt = data["nextSchedule"]
    assert nxt["status"] == "SCHEDULED"
    assert nxt["scheduledAt"].startswith("2025-02-28T09:00:00")
    assert nxt["recurringNextDate"].startswith("2025-03-28T09:00:00")
    assert [t["name"] for t in nxt["tasks"]] == ["Drain oil", "Replace filter"]
    assert all(not t["completed"] for t in nxt["tasks"])

    # saving an already-completed schedule does not book another
    again = workshop_client.put(f"/api/maintenance/{created['id']}", json={"notes": "Invoice attached"}).get_json()
    assert again["nextSchedule"] is None
    assert MaintenanceSchedule.query.count() == 2


def test_completing_one_off_schedule(workshop_client):
    created = workshop_client.post("/api/maintenance", json=_schedule()).get_json()["schedule"]
    data = workshop_client.put(f"/api/maintenance/{created['id']}", json={"status": "COMPLETED"}).get_json()
    assert data["nextSchedule"] is None


def test_list_filters(ops_client):
    ops_client.post("/api/maintenance", json=_schedule())
    ops_client.post("/api/maintenance", json=_schedule(fleetNumber="301", type="INSPECTION",
                                                       scheduledAt="2025-03-01T09:00:00Z"))

    assert len(ops_client.get("/api/maintenance").get_json()["schedules"]) == 2
    assert len(ops_client.get("/api/maintenance?fleetNumber=301").get_json()["schedules"]) == 1
    assert len(ops_client.get("/api/maintenance?type=inspection").get_json()["schedules"]) == 1
    feb = ops_client.get("/api/maintenance?startDate=2025-02-01&endDate=2025-02-28").get_json()["schedules"]
    assert feb == []


def test_delete_schedule_removes_tasks(ops_client):
    created = ops_client.post("/api/maintenance", json=_schedule()).get_json()["schedule"]
    assert ops_client.delete(f"/api/maintenance/{created['id']}").status_code == 200
    assert ops_client.get(f"/api/maintenance/{created['id']}").status_code == 404
    assert db.session.query(MaintenanceSchedule).count() == 0


def test_task_lifecycle(workshop_client):
    created = workshop_client.post("/api/maintenance", json=_schedule(tasks=[])).get_json()["schedule"]
    base = f"/api/maintenance/{created['id']}/tasks"

    task = workshop_client.post(base, json={"name": "Check brakes"}).get_json()["task"]
    assert task["completed"] is False

    done = workshop_client.put(f"{base}/{task['id']}", json={"completed": True}).get_json()["task"]
    assert done["completed"] is True
    assert done["completedAt"] is not None

    undone = workshop_client.put(f"{base}/{task['id']}", json={"completed": False}).get_json()["task"]
    assert undone["completedAt"] is None

    assert workshop_client.put(f"{base}/{task['id']}", json={"completed": "maybe"}).status_code == 400
    assert workshop_client.post(base, json={}).status_code == 400
    assert len(workshop_client.get(base).get_json()["tasks"]) == 1
    assert workshop_client.delete(f"{base}/{task['id']}").status_code == 200
    assert workshop_client.delete(f"{base}/{task['id']}").status_code == 404


def test_task_must_belong_to_schedule(workshop_client):
    a = workshop_client.post("/api/maintenance", json=_schedule()).get_json()["schedule"]
    b = workshop_client.post("/api/maintenance", json=_schedule(tasks=[])).get_json()["schedule"]
    task_id = a["tasks"][0]["id"]
    assert workshop_client.put(f"/api/maintenance/{b['id']}/tasks/{task_id}", json={"notes": "x"}).status_code == 404


def test_maintenance_is_staff_only(client):
    assert client.get("/api/maintenance").status_code == 401
