from conftest import ACCESS_PASSWORDS, grant_access


def test_quick_access_sets_session(client):
    resp = client.post("/api/access", json={"accessType": "workshop", "password": ACCESS_PASSWORDS["workshop"]})
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "accessType": "workshop", "redirect": "/workshop"}

    check = client.get("/api/auth/check").get_json()
    assert check == {"authenticated": True, "accessLevel": "workshop"}


def test_quick_access_wrong_password(client):
    resp = client.post("/api/access", json={"accessType": "admin", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Invalid password"}
    assert client.get("/api/auth/check").get_json()["authenticated"] is False


def test_quick_access_validation(client):
    resp = client.post("/api/access", json={"accessType": "driver"})
    assert resp.status_code == 400
    fields = [d["field"] for d in resp.get_json()["details"]]
    assert fields == ["accessType", "password"]

    resp = client.post("/api/access", data="accessType=admin")
    assert resp.status_code == 415


def test_json_bodies_must_be_objects(client):
    resp = client.post("/api/auth/login", json=[1])
    assert resp.status_code == 400
    assert resp.get_json()["details"] == [{"field": "body", "message": "Expected a JSON object"}]
    assert client.post("/api/access", json="admin").status_code == 400


def test_logout_clears_access(ops_client):
    assert ops_client.post("/api/auth/logout").get_json() == {"success": True}
    assert ops_client.get("/api/auth/check").get_json() == {"authenticated": False, "accessLevel": None}


def test_account_login(client, make_user):
    make_user(email="ops@example.com", role="OPERATIONS", name="Ops", username="ops")
    resp = client.post("/api/auth/login", json={"username": "ops", "password": "password123"})
    assert resp.status_code == 200
    assert resp.get_json()["user"]["role"] == "OPERATIONS"
    assert client.get("/api/auth/check").get_json()["authenticated"] is True


def test_account_login_rejects_drivers_and_bad_passwords(client, make_user):
    make_user(email="driver@example.com", role="DRIVER", name="Driver")
    make_user(email="ws@example.com", role="WORKSHOP", name="Workshop")

    resp = client.post("/api/auth/login", json={"email": "driver@example.com", "password": "password123"})
    assert resp.status_code == 401
    resp = client.post("/api/auth/login", json={"email": "WS@example.com", "password": "wrong-pass"})
    assert resp.status_code == 401
    resp = client.post("/api/auth/login", json={"password": "abc"})
    assert resp.status_code == 400


def test_protected_pages_redirect_to_access(client):
    resp = client.get("/workshop")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/access")


def test_wrong_portal_redirects_home(client):
    grant_access(client, "workshop")
    resp = client.get("/operations")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/")
    assert client.get("/workshop").status_code == 200


def test_protected_pages_are_not_indexed(admin_client):
    resp = admin_client.get("/admin")
    assert resp.status_code == 200
    assert resp.headers["X-Robots-Tag"] == "noindex, nofollow"
    assert "default-src 'self'" in resp.headers["Content-Security-Policy"]


def test_public_pages_render(client):
    for path in ("/", "/report", "/access"):
        assert client.get(path).status_code == 200, path


def test_staff_api_needs_a_session(client):
    resp = client.get("/api/metrics")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Unauthorized"}
