"""Flask extension wiring the Auth0 services into an application.

Usage:
    app = Flask(__name__)
    app.config["AUTH0_OPTIONS"] = {"domain": ..., "client_id": ..., "client_secret": ...}
    init_app(app)
    # GET /auth0/users, POST /auth0/tickets?type=password_reset, ...
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from flask import Flask, current_app

from auth0_manager.core.bulk import DEFAULT_MAX_WORKERS
from auth0_manager.core.context import ServiceContext
from auth0_manager.core.errors import ManagerError, OperationNotImplemented
from auth0_manager.core.management import ManagementClient
from auth0_manager.core.scopes import ScopeGate, ScopeStore, ensure_scopes
from auth0_manager.core.tickets_service import TicketsService
from auth0_manager.core.users_service import UsersService
from auth0_manager.core.validators import PasswordPolicy

EXTENSION_KEY = "auth0_manager"

logger = logging.getLogger(__name__)


@dataclass
class Auth0Services:
    """Everything ``init_app`` stores in ``app.extensions``."""

    client: Any
    scope_store: ScopeStore
    users: UsersService
    tickets: TicketsService


def init_app(app: Flask, client_factory: Callable[..., Any] = ManagementClient) -> Auth0Services:
    """Create the Management API client and register the services.

    Reads from ``app.config``:
        AUTH0_OPTIONS: ``{"domain", "client_id", "client_secret", "audience"?, "timeout"?}``
        AUTH0_PAGINATE: pagination policy (default ``{"default": 10, "max": 50}``)
        AUTH0_USERS_MULTI: bulk capability of the users service (default False)
        AUTH0_PASSWORD_POLICY: ``PasswordPolicy`` keyword arguments
        AUTH0_BULK_MAX_WORKERS: bulk thread pool size

    Raises:
        OperationNotImplemented: If the credentials are missing
        ManagerError: If the client cannot be created
        UpstreamFailure: If the token scopes cannot be read
    """
    creds = app.config.get("AUTH0_OPTIONS") or {}
    if not creds.get("domain") or not creds.get("client_id") or not creds.get("client_secret"):
        raise OperationNotImplemented("Auth0 Management Client credentials have not been set correctly.")

    try:
        client = client_factory(**{key: value for key, value in creds.items() if value is not None})
    except Exception as exc:
        raise ManagerError("Could not create Auth0 Management client.", str(exc)) from exc

    scope_store = ScopeStore()
    ensure_scopes(scope_store, client)

    paginate = app.config.get("AUTH0_PAGINATE", {"default": 10, "max": 50})
    password_policy = PasswordPolicy(**(app.config.get("AUTH0_PASSWORD_POLICY") or {}))
    max_workers = app.config.get("AUTH0_BULK_MAX_WORKERS", DEFAULT_MAX_WORKERS)

    users = UsersService(ServiceContext(
        client=client,
        scopes=ScopeGate(scope_store),
        paginate=paginate,
        multi=app.config.get("AUTH0_USERS_MULTI", False),
        password_policy=password_policy,
        bulk_max_workers=max_workers,
    ))
    tickets = TicketsService(ServiceContext(
        client=client,
        scopes=ScopeGate(scope_store),
        paginate=paginate,
    ))

    services = Auth0Services(client=client, scope_store=scope_store, users=users, tickets=tickets)
    app.extensions[EXTENSION_KEY] = services

    from auth0_manager.api import tickets as tickets_routes
    from auth0_manager.api import users as users_routes

    app.register_blueprint(users_routes.bp, url_prefix="/auth0/users")
    app.register_blueprint(tickets_routes.bp, url_prefix="/auth0/tickets")

    logger.info("Auth0 services registered at /auth0/users and /auth0/tickets")
    return services


def current_services(app: Optional[Flask] = None) -> Auth0Services:
    """Return the services registered on ``app`` (default: the current app)."""
    app = app or current_app
    return app.extensions[EXTENSION_KEY]
