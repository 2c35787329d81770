import pytest

from fleet_repairs import create_app
from fleet_repairs.db_models import db, Issue, User
from fleet_repairs.utils.parsing import utcnow

ACCESS_PASSWORDS = {
    "operations": "ops-test-pass",
    "workshop": "workshop-test-pass",
    "admin": "admin-test-pass",
}


@pytest.fixture
def test_app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        "RATELIMIT_ENABLED": False,
        "MAIL_SUPPRESS_SEND": True,
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        "OPERATIONS_PASSWORD": ACCESS_PASSWORDS["operations"],
        "WORKSHOP_PASSWORD": ACCESS_PASSWORDS["workshop"],
        "ADMIN_PASSWORD": ACCESS_PASSWORDS["admin"],
        "GEARBOX_CLIENT_ID": None,
        "GEARBOX_CLIENT_SECRET": None,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()

        # 🛡️ Protect against real DB being wiped
        db_url = app.config["SQLALCHEMY_DATABASE_URI"]
        if "sqlite:///:memory:" not in db_url:
            raise RuntimeError(f"Refusing to drop_all() on non-test DB: {db_url}")

        db.drop_all()


@pytest.fixture
def client(test_app):
    return test_app.test_client()


def grant_access(client, level):
    resp = client.post("/api/access", json={"accessType": level, "password": ACCESS_PASSWORDS[level]})
    assert resp.status_code == 200, resp.get_json()
    return resp


@pytest.fixture
def ops_client(client):
    grant_access(client, "operations")
    return client


@pytest.fixture
def workshop_client(client):
    grant_access(client, "workshop")
    return client


@pytest.fixture
def admin_client(client):
    grant_access(client, "admin")
    return client


@pytest.fixture
def make_user(test_app):
    def _make(email="staff@example.com", role="WORKSHOP", name="Staff Member", password="password123", **kw):
        user = User(email=email, role=role, name=name, **kw)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def make_issue(test_app):
    def _make(**kw):
        now = utcnow()
        fields = {
            "ticket": Issue.next_ticket(),
            "status": "PENDING",
            "severity": "MEDIUM",
            "category": "Brakes",
            "description": "Brakes squealing under load",
            "fleet_number": "T215",
            "driver_name": "John Smith",
            "location": "Melbourne Depot",
            "created_at": now,
            "updated_at": now,
        }
        fields.update(kw)
        issue = Issue(**fields)
        db.session.add(issue)
        db.session.commit()
        return issue
    return _make
