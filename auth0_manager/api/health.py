"""Health check endpoints."""
from flask import Blueprint, current_app

from auth0_manager.extension import EXTENSION_KEY

bp = Blueprint("health", __name__)


@bp.route("/health")
def health_check():
    """Basic health check endpoint."""
    return ("ok", 200, {"Content-Type": "text/plain"})


@bp.route("/ready")
def readiness_check():
    """Ready once the services are registered and the token scopes are known."""
    services = current_app.extensions.get(EXTENSION_KEY)
    if services is None or services.scope_store.current() is None:
        return ("not ready", 503, {"Content-Type": "text/plain"})
    return ("ready", 200, {"Content-Type": "text/plain"})
