from fleet_repairs.services.settings import DEFAULT_SETTINGS


def test_defaults_are_public(client):
    assert client.get("/api/settings").get_json() == DEFAULT_SETTINGS


def test_admin_updates_persist_and_merge(admin_client):
    resp = admin_client.patch("/api/settings", json={"siteName": "Depot Repairs", "syncInterval": 5})
    assert resp.status_code == 200
    assert resp.get_json()["siteName"] == "Depot Repairs"

    admin_client.patch("/api/settings", json={"maintenanceMode": True})
    data = admin_client.get("/api/settings").get_json()
    assert data["siteName"] == "Depot Repairs"
    assert data["syncInterval"] == 5
    assert data["maintenanceMode"] is True
    assert data["autoArchiveDays"] == 90


def test_first_validation_error_is_returned(admin_client):
    resp = admin_client.patch("/api/settings", json={"autoArchiveDays": 1000, "emailAlerts": "no"})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "emailAlerts must be a boolean"}


def test_only_admins_may_update(workshop_client):
    assert workshop_client.patch("/api/settings", json={"siteName": "X"}).status_code == 401
