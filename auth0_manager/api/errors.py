"""Error handlers for the application.

Every error is rendered as JSON: ``{"name", "message", "code", "data"?}``.
"""
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from auth0_manager.core.errors import ManagerError

logger = logging.getLogger(__name__)


def handle_manager_error(error: ManagerError):
    """Render a ManagerError raised by a service."""
    if error.status >= 500:
        logger.error("%s: %s", error.name, error.message)
    return jsonify(error.to_dict()), error.status


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    app.register_error_handler(ManagerError, handle_manager_error)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        """Handle routing errors (404, 405, 413, ...)."""
        body = {
            "name": error.name.replace(" ", ""),
            "message": error.description,
            "code": error.code,
        }
        return jsonify(body), error.code

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # ALWAYS log the error (even in production) - logs are secure
        app.logger.error(f"Unhandled exception: {error}", exc_info=True)
        body = {
            "name": "GeneralError",
            "message": "An unexpected error occurred",
            "code": 500,
        }
        return jsonify(body), 500
