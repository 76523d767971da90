"""Pytest shared fixtures: a fake Auth0 record store and service wiring."""
import pathlib
import sys
import threading
from typing import Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import jwt
import pytest

from auth0_manager.config import AppConfig
from auth0_manager.core.context import ServiceContext
from auth0_manager.core.management import ManagementAPIError
from auth0_manager.core.scopes import ScopeGate, ScopeStore
from auth0_manager.core.tickets_service import TicketsService
from auth0_manager.core.users_service import UsersService

ALL_SCOPES = [
    "read:users",
    "update:users",
    "delete:users",
    "create:users",
    "read:users_app_metadata",
    "update:users_app_metadata",
    "create:user_tickets",
]

TOKEN_KEY = "test-signing-key-with-at-least-32-bytes!"


def make_token(scopes) -> str:
    return jwt.encode({"scope": " ".join(scopes), "sub": "client@clients"}, TOKEN_KEY, algorithm="HS256")


def make_users(count: int = 250) -> list:
    """Deterministic Auth0-shaped users."""
    users = []
    for i in range(count):
        users.append({
            "user_id": f"auth0|{i:05d}",
            "email": f"user{i}@example.com",
            "name": f"User {i}",
            "family_name": "Doe" if i % 2 else "Roe",
            "logins_count": i % 7,
            "app_metadata": {"roles": ["user"], "plan": {"tier": "free", "seats": 1}},
            "user_metadata": {"theme": "dark"},
        })
    return users


# ─────────────────────────────────────────────────────────────────────────────
# Fake record store
# ─────────────────────────────────────────────────────────────────────────────
class FakeManagementClient:
    """In-memory stand-in for ``ManagementClient``.

    ``matching`` is the result set returned for any search carrying a ``q``
    (Lucene is not evaluated); searches without ``q`` return every user.
    """

    def __init__(self, users=None, scopes=None, fail_token=False, **options):
        self.options = options
        self.users = make_users() if users is None else users
        self.matching: Optional[list] = None
        self.scopes = ALL_SCOPES if scopes is None else scopes
        self.fail_token = fail_token
        self.fail_ids = set()
        self.queries = []
        self.calls = []
        self._lock = threading.Lock()

    def _record(self, *call):
        with self._lock:
            self.calls.append(call)

    def get_access_token(self) -> str:
        if self.fail_token:
            raise ManagementAPIError(401, "Unauthorized", "https://example.auth0.com/oauth/token")
        return make_token(self.scopes)

    def get_users(self, query):
        self.queries.append(dict(query))
        source = self.matching if (self.matching is not None and "q" in query) else self.users
        per_page, page = query.get("per_page", 50), query.get("page", 0)
        chunk = [dict(user) for user in source[page * per_page:(page + 1) * per_page]]
        if query.get("include_totals"):
            return {
                "start": page * per_page,
                "limit": per_page,
                "length": len(chunk),
                "total": len(source),
                "users": chunk,
            }
        return chunk

    def get_user(self, user_id):
        self._record("get_user", user_id)
        return next((dict(user) for user in self.users if user["user_id"] == user_id), None)

    def get_users_by_email(self, email):
        self._record("get_users_by_email", email)
        return [dict(user) for user in self.users if user["email"] == email]

    def create_user(self, data):
        self._record("create_user", data)
        return dict(data, user_id="auth0|new")

    def update_user(self, user_id, data):
        self._record("update_user", user_id, data)
        if user_id in self.fail_ids:
            raise ManagementAPIError(500, "boom", f"/api/v2/users/{user_id}")
        current = next((user for user in self.users if user["user_id"] == user_id), {})
        return dict(current, **data)

    def delete_user(self, user_id):
        self._record("delete_user", user_id)
        if user_id in self.fail_ids:
            raise ManagementAPIError(500, "boom", f"/api/v2/users/{user_id}")

    def create_password_change_ticket(self, data):
        self._record("create_password_change_ticket", data)
        return {"ticket": "https://example.auth0.com/lo/reset?ticket=abc"}

    def send_email_verification(self, data):
        self._record("send_email_verification", data)
        return {"type": "verification_email", "status": "pending", "id": "job_1"}

    def calls_to(self, method):
        return [call for call in self.calls if call[0] == method]


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture
def fake_client():
    return FakeManagementClient()


@pytest.fixture
def scope_store():
    return ScopeStore(ALL_SCOPES)


@pytest.fixture
def make_context(fake_client, scope_store):
    def _make(**overrides):
        base = dict(
            client=fake_client,
            scopes=ScopeGate(scope_store),
            paginate={"default": 10, "max": 50},
            multi=True,
            bulk_max_workers=4,
        )
        base.update(overrides)
        return ServiceContext(**base)
    return _make


@pytest.fixture
def users_service(make_context):
    return UsersService(make_context())


@pytest.fixture
def tickets_service(make_context):
    return TicketsService(make_context(multi=False))


@pytest.fixture
def app_config():
    return AppConfig(
        auth0_domain="example.auth0.com",
        auth0_client_id="client-id",
        auth0_client_secret="client-secret",
        users_multi=True,
    )


@pytest.fixture
def app(app_config, fake_client):
    from auth0_manager.flask_app import create_app

    def factory(**options):
        fake_client.options = options
        return fake_client

    flask_app = create_app(app_config, client_factory=factory)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
