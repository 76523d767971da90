"""REST endpoints for ``/auth0/users``.

    GET    /auth0/users          find (filter in the query string)
    GET    /auth0/users/<id>     get by user_id or email
    POST   /auth0/users          create
    PUT    /auth0/users/<id>     not implemented
    PATCH  /auth0/users/<id>     patch one user
    PATCH  /auth0/users          patch every user matching the query string
    DELETE /auth0/users/<id>     remove one user
    DELETE /auth0/users          remove every user matching the query string

All business logic lives in ``auth0_manager.core.users_service``.
"""
from __future__ import annotations
import logging

from flask import Blueprint, jsonify, request

from auth0_manager.api.errors import handle_manager_error
from auth0_manager.api.query_args import parse_query_args
from auth0_manager.core.errors import InvalidArgument, ManagerError
from auth0_manager.extension import current_services

bp = Blueprint("auth0_users", __name__)
bp.register_error_handler(ManagerError, handle_manager_error)

# Configuration
JSON_MAX_SIZE_BYTES = 65536  # 64 KB

logger = logging.getLogger(__name__)


def _json_body() -> dict:
    if request.content_length and request.content_length > JSON_MAX_SIZE_BYTES:
        raise InvalidArgument("Request payload exceeds maximum allowed size (64 KB)")
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise InvalidArgument("Request body must be a JSON object.")
    return payload


def _service():
    return current_services().users


@bp.after_request
def add_correlation_id(response):
    """Echo the correlation ID for tracing."""
    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        response.headers["X-Correlation-Id"] = correlation_id
    return response


@bp.route("", methods=["GET"])
def find_users():
    return jsonify(_service().find({"query": parse_query_args(request.args)})), 200


@bp.route("/<user_id>", methods=["GET"])
def get_user(user_id: str):
    return jsonify(_service().get(user_id, {})), 200


@bp.route("", methods=["POST"])
def create_user():
    return jsonify(_service().create(_json_body(), {})), 201


@bp.route("/<user_id>", methods=["PUT"])
def replace_user(user_id: str):
    return jsonify(_service().update(user_id, request.get_json(silent=True), {})), 200


@bp.route("/<user_id>", methods=["PATCH"])
def patch_user(user_id: str):
    return jsonify(_service().patch(user_id, _json_body(), {})), 200


@bp.route("", methods=["PATCH"])
def patch_users():
    """Bulk patch; the filter comes from the query string."""
    query = parse_query_args(request.args)
    logger.info("Bulk patch requested with filter %s", query)
    return jsonify(_service().patch(None, _json_body(), {"query": query})), 200


@bp.route("/<user_id>", methods=["DELETE"])
def remove_user(user_id: str):
    return jsonify(_service().remove(user_id, {})), 200


@bp.route("", methods=["DELETE"])
def remove_users():
    """Bulk removal; the filter comes from the query string."""
    query = parse_query_args(request.args)
    logger.info("Bulk removal requested with filter %s", query)
    return jsonify(_service().remove(None, {"query": query})), 200
