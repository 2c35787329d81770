import json

from conftest import grant_access
from fleet_repairs.db_models import db, Mapping, User, WorkOrder
from fleet_repairs.utils.parsing import utcnow


def test_create_and_list_users(admin_client):
    resp = admin_client.post("/api/admin/users", json={
        "name": "Dave Fitter", "email": "Dave@Example.com", "password": "secret1", "role": "workshop",
    })
    assert resp.status_code == 201
    user = resp.get_json()
    assert user["email"] == "dave@example.com"
    assert user["role"] == "WORKSHOP"
    assert "password" not in user and "passwordHash" not in user
    assert db.session.get(User, user["id"]).check_password("secret1")

    users = admin_client.get("/api/admin/users").get_json()
    assert [u["email"] for u in users] == ["dave@example.com"]


def test_create_user_validation_and_duplicates(admin_client, make_user):
    make_user(email="taken@example.com")
    resp = admin_client.post("/api/admin/users", json={"email": "bad", "password": "123", "role": "boss"})
    assert resp.status_code == 400
    assert {d["field"] for d in resp.get_json()["details"]} == {"name", "email", "password", "role"}

    resp = admin_client.post("/api/admin/users", json={
        "name": "Again", "email": "taken@example.com", "password": "secret1", "role": "ADMIN",
    })
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "User with this email already exists"}


def test_delete_user(admin_client, make_user):
    user = make_user()
    assert admin_client.delete(f"/api/admin/users/{user.id}").get_json() == {"success": True}
    assert admin_client.delete(f"/api/admin/users/{user.id}").status_code == 404


def test_admin_cannot_delete_own_account(client, make_user):
    admin = make_user(email="boss@example.com", role="ADMIN", name="Boss")
    client.post("/api/auth/login", json={"email": "boss@example.com", "password": "password123"})
    resp = client.delete(f"/api/admin/users/{admin.id}")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Cannot delete your own account"}


def test_admin_routes_reject_other_staff(client):
    grant_access(client, "operations")
    assert client.get("/api/admin/users").status_code == 401
    assert client.get("/api/admin/dashboard").status_code == 401
    assert client.get("/api/export/all").status_code == 401


def test_admin_dashboard(admin_client, make_issue):
    issue = make_issue(severity="CRITICAL")
    make_issue(status="COMPLETED", category="Engine")
    now = utcnow()
    db.session.add(WorkOrder(issue_id=issue.id, start_at=now, end_at=now, workshop_site="Melbourne"))
    db.session.add(Mapping(kind="fleet", key="412", value="{}"))
    db.session.commit()

    data = admin_client.get("/api/admin/dashboard").get_json()
    assert data["totalIssues"] == 2
    assert data["pendingIssues"] == 1
    assert data["completedIssues"] == 1
    assert data["criticalIssues"] == 1
    assert data["scheduledWorkOrders"] == 1
    assert data["totalFleetUnits"] == 1
    assert data["issuesByCategory"] == {"Brakes": 1, "Engine": 1}
    assert len(data["recentIssues"]) == 2


def test_export_all(admin_client, make_issue, make_user):
    make_issue()
    make_user()
    resp = admin_client.get("/api/export/all")
    assert resp.status_code == 200
    assert resp.headers["Content-Disposition"].startswith('attachment; filename="se-repairs-export-')

    payload = json.loads(resp.get_data(as_text=True))
    assert payload["summary"] == {"totalIssues": 1, "totalWorkOrders": 0, "totalUsers": 1, "totalMappings": 0}
    assert payload["issues"][0]["comments"] == []
