import pytest

from fleet_repairs.services import access_control
from fleet_repairs.services.access_control import client_key, evaluate, role_from_access_level


@pytest.mark.parametrize("path", ["/", "/report", "/access", "/api/issues", "/api/issues/3", "/api/upload"])
def test_public_paths_allow_anonymous(path):
    assert evaluate(path, None).allowed


def test_root_is_matched_exactly():
    assert access_control.is_public("/")
    assert not access_control.is_public("/workshop")


def test_protected_path_without_staff_role_redirects_to_access():
    decision = evaluate("/workshop", None)
    assert not decision.allowed
    assert decision.redirect_to == "/access"

    decision = evaluate("/schedule", "DRIVER")
    assert decision.redirect_to == "/access"


def test_wrong_staff_role_redirects_home():
    decision = evaluate("/admin/users", "WORKSHOP")
    assert not decision.allowed
    assert decision.redirect_to == "/"

    assert evaluate("/operations", "WORKSHOP").redirect_to == "/"
    assert evaluate("/workshop", "OPERATIONS").redirect_to == "/"


def test_admin_reaches_every_portal():
    for path in ("/admin", "/operations", "/workshop", "/schedule", "/issues", "/fleet/412/history"):
        assert evaluate(path, "ADMIN").allowed, path


def test_prefix_match_needs_a_path_boundary():
    # /issuesxyz is neither the /issues page nor below it
    assert evaluate("/issuesxyz", None).allowed
    assert not evaluate("/issues/12", None).allowed


def test_unlisted_paths_pass_through():
    assert evaluate("/api/dashboard", None).allowed


def test_role_from_access_level():
    assert role_from_access_level("operations") == "OPERATIONS"
    assert role_from_access_level("admin") == "ADMIN"
    assert role_from_access_level("driver") is None
    assert role_from_access_level(None) is None


def test_client_key_prefers_first_forwarded_hop():
    assert client_key({"X-Forwarded-For": "10.0.0.1, 10.0.0.2", "X-Real-IP": "10.9.9.9"}) == "10.0.0.1"
    assert client_key({"X-Real-IP": " 10.9.9.9 "}) == "10.9.9.9"
    assert client_key({}) == "unknown"
