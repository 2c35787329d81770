import pytest
import requests

from fleet_repairs.services.gearbox import (
    GEARBOX_BASE_URL,
    GEARBOX_TOKEN_URL,
    GearboxClient,
    GearboxNotConfigured,
    get_gearbox_client,
)


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def json(self):
        return self.payload

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")


class FakeSession:
    def __init__(self, token_status=200):
        self.token_status = token_status
        self.calls = []

    def post(self, url, data=None, timeout=None):
        self.calls.append(("POST", url, data))
        return FakeResponse({"access_token": "tok-1", "expires_in": 3600}, self.token_status)

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append((method, url, params, json, headers))
        return FakeResponse({"data": [{"id": 1}]})


def test_token_is_fetched_once_and_reused():
    session = FakeSession()
    client = GearboxClient("id", "secret", session=session)
    client.get_vehicles()
    client.get_services(filter_="open")

    token_calls = [c for c in session.calls if c[0] == "POST" and c[1] == GEARBOX_TOKEN_URL]
    assert len(token_calls) == 1
    assert token_calls[0][2]["grant_type"] == "client_credentials"

    method, url, params, _, headers = session.calls[-1]
    assert (method, url, params) == ("GET", f"{GEARBOX_BASE_URL}/v1/services", {"filter": "open"})
    assert headers == {"Authorization": "Bearer tok-1"}


def test_create_fault_report_posts_payload():
    session = FakeSession()
    client = GearboxClient("id", "secret", session=session)
    client.create_fault_report({"vehicle_id": "412"})
    method, url, _, payload, _ = session.calls[-1]
    assert (method, url, payload) == ("POST", f"{GEARBOX_BASE_URL}/v1/fault_reports", {"vehicle_id": "412"})


def test_authentication_failure_propagates():
    client = GearboxClient("id", "bad", session=FakeSession(token_status=401))
    with pytest.raises(requests.HTTPError):
        client.get_vehicles()


def test_missing_credentials(test_app):
    with pytest.raises(GearboxNotConfigured):
        get_gearbox_client()
