"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with the Auth0 services, error handlers and
proxy configuration.
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from auth0_manager.config import AppConfig, load_settings
from auth0_manager.core.management import ManagementClient


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(
    cfg: Optional[AppConfig] = None,
    client_factory: Callable[..., Any] = ManagementClient,
) -> Flask:
    """Create and configure Flask application."""
    # Load configuration
    cfg = cfg or load_settings()

    # Create Flask app
    app = Flask(__name__)

    # Store config for easy access in routes
    app.config["APP_CONFIG"] = cfg
    app.config["AUTH0_OPTIONS"] = dict(cfg.auth0_options, timeout=cfg.request_timeout)
    app.config["AUTH0_PAGINATE"] = cfg.paginate
    app.config["AUTH0_USERS_MULTI"] = cfg.users_multi
    app.config["AUTH0_PASSWORD_POLICY"] = cfg.password_policy_options
    app.config["AUTH0_BULK_MAX_WORKERS"] = cfg.bulk_max_workers

    # Trust X-Forwarded-* headers from proxy (nginx)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    # Register blueprints
    from auth0_manager.api import errors, health
    from auth0_manager.extension import init_app

    app.register_blueprint(health.bp)
    init_app(app, client_factory=client_factory)

    # Register error handlers
    errors.register_error_handlers(app)

    logging.getLogger(__name__).info(
        "Auth0 user management API ready (domain=%s, paginate=%s, multi=%s)",
        cfg.auth0_domain, cfg.paginate, cfg.users_multi,
    )
    return app
