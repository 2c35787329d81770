# fleet_repairs/services/gearbox.py
"""Client for the Gearbox fleet API (OAuth client-credentials)."""
import logging
import time

import requests
from flask import current_app

logger = logging.getLogger(__name__)

GEARBOX_TOKEN_URL = "https://api.gearbox.com.au/oauth/token"
GEARBOX_BASE_URL = "https://api.gearbox.com.au/public"
REQUEST_TIMEOUT = 30


class GearboxNotConfigured(RuntimeError):
    pass


class GearboxClient:
    def __init__(self, client_id, client_secret, session=None):
        self.client_id = client_id
        self.client_secret = client_secret
        self.api_session = session or requests.Session()
        self._access_token = None
        self._token_expiry = 0.0

    def authenticate(self):
        try:
            response = self.api_session.post(
                GEARBOX_TOKEN_URL,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("Failed to authenticate with Gearbox API: %s", e)
            raise

        data = response.json()
        self._access_token = data["access_token"]
        self._token_expiry = time.time() + int(data.get("expires_in", 0))
        logger.info("Successfully authenticated with Gearbox API")
        return self._access_token

    def get_access_token(self):
        if not self._access_token or time.time() >= self._token_expiry:
            self.authenticate()
        return self._access_token

    def _request(self, method, endpoint, params=None, payload=None):
        token = self.get_access_token()
        response = self.api_session.request(
            method,
            f"{GEARBOX_BASE_URL}{endpoint}",
            params=params,
            json=payload,
            headers={"Authorization": f"Bearer {token}"},
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _filter_params(filter_):
        return {"filter": filter_} if filter_ else None

    def get_vehicles(self, filter_=None):
        return self._request("GET", "/v1/vehicles", params=self._filter_params(filter_))

    def get_services(self, filter_=None):
        return self._request("GET", "/v1/services", params=self._filter_params(filter_))

    def get_fault_reports(self, filter_=None):
        return self._request("GET", "/v1/fault_reports", params=self._filter_params(filter_))

    def create_service(self, service_data):
        return self._request("POST", "/v1/services", payload=service_data)

    def create_fault_report(self, report_data):
        return self._request("POST", "/v1/fault_reports", payload=report_data)


def get_gearbox_client():
    """One client per app so the access token is reused between requests."""
    client = current_app.extensions.get("gearbox_client")
    if client is None:
        client_id = current_app.config.get("GEARBOX_CLIENT_ID")
        client_secret = current_app.config.get("GEARBOX_CLIENT_SECRET")
        if not client_id or not client_secret:
            raise GearboxNotConfigured(
                "Gearbox credentials not configured. Please set GEARBOX_CLIENT_ID "
                "and GEARBOX_CLIENT_SECRET environment variables."
            )
        client = GearboxClient(client_id, client_secret)
        current_app.extensions["gearbox_client"] = client
    return client
