"""Low-level HTTP client for the Auth0 Management API v2.

Handles client-credentials authentication, token caching and the user and
ticket endpoints used by the services.
"""
from __future__ import annotations
import logging
from typing import Optional, Dict, Any, List
from datetime import datetime, timedelta
from urllib.parse import quote

import requests

from .exceptions import ManagementAPIError

REQUEST_TIMEOUT = 10

logger = logging.getLogger(__name__)


class ManagementClient:
    """HTTP client for the Auth0 Management API with automatic token management.

    Features:
    - Client credentials grant with token caching
    - Refresh shortly before the token expires
    - Centralized error handling

    Usage:
        client = ManagementClient("example.auth0.com", "client-id", "secret")
        users = client.get_users({"per_page": 10, "page": 0, "search_engine": "v3"})
    """

    def __init__(
        self,
        domain: str,
        client_id: str,
        client_secret: str,
        audience: Optional[str] = None,
        timeout: int = REQUEST_TIMEOUT,
    ):
        """Initialize the Management API client.

        Args:
            domain: Tenant domain (``example.auth0.com``) or full base URL
            client_id: Machine-to-machine application client ID
            client_secret: Machine-to-machine application client secret
            audience: Token audience (defaults to ``<base_url>/api/v2/``)
            timeout: Per-request timeout in seconds

        Raises:
            ValueError: If any credential is missing
        """
        if not domain or not client_id or not client_secret:
            raise ValueError("Management API client requires domain, client_id and client_secret")
        if domain.startswith("http://") or domain.startswith("https://"):
            self.base_url = domain.rstrip("/")
        else:
            self.base_url = f"https://{domain.strip('/')}"
        self.client_id = client_id
        self.client_secret = client_secret
        self.audience = audience or f"{self.base_url}/api/v2/"
        self.timeout = timeout
        self._token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None

    # ─────────────────────────────────────────────────────────────────────
    # Authentication
    # ─────────────────────────────────────────────────────────────────────
    def get_access_token(self) -> str:
        """Return a valid access token, requesting a new one when needed."""
        # Refresh if token expired or expiring soon (within 10 seconds)
        if (
            self._token is None
            or self._token_expires_at is None
            or datetime.now() >= self._token_expires_at - timedelta(seconds=10)
        ):
            self._token, expires_in = self._request_token()
            self._token_expires_at = datetime.now() + timedelta(seconds=expires_in)
            logger.debug("Management API token refreshed (expires_in=%s)", expires_in)
        return self._token

    def _request_token(self) -> tuple[str, int]:
        """Fetch a token using the client credentials flow."""
        url = f"{self.base_url}/oauth/token"
        data = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "audience": self.audience,
        }
        resp = requests.post(url, json=data, timeout=self.timeout)
        if resp.status_code != 200:
            raise ManagementAPIError(resp.status_code, resp.text, url)
        payload = resp.json()
        return payload["access_token"], int(payload.get("expires_in", 86400))

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.get_access_token()}"}

    # ─────────────────────────────────────────────────────────────────────
    # HTTP verbs
    # ─────────────────────────────────────────────────────────────────────
    def get(self, path: str, params: Optional[Dict] = None) -> requests.Response:
        """Execute GET request with automatic authentication.

        Raises:
            ManagementAPIError: On HTTP error
        """
        url = f"{self.base_url}{path}"
        resp = requests.get(url, params=params, headers=self._headers(), timeout=self.timeout)
        self._handle_error(resp)
        return resp

    def post(self, path: str, json: Optional[Dict] = None) -> requests.Response:
        """Execute POST request with automatic authentication.

        Raises:
            ManagementAPIError: On HTTP error
        """
        url = f"{self.base_url}{path}"
        resp = requests.post(url, json=json, headers=self._headers(), timeout=self.timeout)
        self._handle_error(resp)
        return resp

    def patch(self, path: str, json: Optional[Dict] = None) -> requests.Response:
        """Execute PATCH request with automatic authentication.

        Raises:
            ManagementAPIError: On HTTP error
        """
        url = f"{self.base_url}{path}"
        resp = requests.patch(url, json=json, headers=self._headers(), timeout=self.timeout)
        self._handle_error(resp)
        return resp

    def delete(self, path: str) -> requests.Response:
        """Execute DELETE request with automatic authentication.

        Raises:
            ManagementAPIError: On HTTP error
        """
        url = f"{self.base_url}{path}"
        resp = requests.delete(url, headers=self._headers(), timeout=self.timeout)
        self._handle_error(resp)
        return resp

    def _handle_error(self, resp: requests.Response) -> None:
        """Raise ManagementAPIError if the response status indicates an error."""
        if resp.status_code >= 400:
            raise ManagementAPIError(resp.status_code, resp.text, resp.url)

    # ─────────────────────────────────────────────────────────────────────
    # Users
    # ─────────────────────────────────────────────────────────────────────
    def get_users(self, query: Dict[str, Any]) -> Any:
        """Search users; returns a dict when ``include_totals`` is set, else a list."""
        params = {
            key: (str(value).lower() if isinstance(value, bool) else value)
            for key, value in query.items()
        }
        return self.get("/api/v2/users", params=params).json()

    def get_user(self, user_id: str) -> Optional[dict]:
        """Return a single user, or None when it does not exist."""
        try:
            return self.get(f"/api/v2/users/{_quote(user_id)}").json()
        except ManagementAPIError as exc:
            if exc.status_code == 404:
                return None
            raise

    def get_users_by_email(self, email: str) -> List[dict]:
        return self.get("/api/v2/users-by-email", params={"email": email}).json()

    def create_user(self, data: Dict[str, Any]) -> dict:
        return self.post("/api/v2/users", json=data).json()

    def update_user(self, user_id: str, data: Dict[str, Any]) -> dict:
        return self.patch(f"/api/v2/users/{_quote(user_id)}", json=data).json()

    def delete_user(self, user_id: str) -> None:
        self.delete(f"/api/v2/users/{_quote(user_id)}")

    # ─────────────────────────────────────────────────────────────────────
    # Tickets and jobs
    # ─────────────────────────────────────────────────────────────────────
    def create_password_change_ticket(self, data: Dict[str, Any]) -> dict:
        return self.post("/api/v2/tickets/password-change", json=data).json()

    def send_email_verification(self, data: Dict[str, Any]) -> dict:
        return self.post("/api/v2/jobs/verification-email", json=data).json()


def _quote(user_id: str) -> str:
    # user ids contain "|" (e.g. "auth0|abc")
    return quote(str(user_id), safe="")
