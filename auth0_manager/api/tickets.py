"""REST endpoints for ``/auth0/tickets``.

Only ``POST /auth0/tickets?type=password_reset|email_verification`` is
supported; the other verbs answer 501.
"""
from __future__ import annotations

from flask import Blueprint, jsonify, request

from auth0_manager.api.errors import handle_manager_error
from auth0_manager.core.errors import ManagerError
from auth0_manager.extension import current_services

bp = Blueprint("auth0_tickets", __name__)
bp.register_error_handler(ManagerError, handle_manager_error)


def _service():
    return current_services().tickets


@bp.route("", methods=["POST"])
def create_ticket():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    return jsonify(_service().create(data, {"type": request.args.get("type")})), 201


@bp.route("", methods=["GET"])
def find_tickets():
    return jsonify(_service().find()), 200


@bp.route("/<ticket_id>", methods=["GET"])
def get_ticket(ticket_id: str):
    return jsonify(_service().get(ticket_id)), 200


@bp.route("/<ticket_id>", methods=["PUT"])
def replace_ticket(ticket_id: str):
    return jsonify(_service().update(ticket_id)), 200


@bp.route("/<ticket_id>", methods=["PATCH"])
def patch_ticket(ticket_id: str):
    return jsonify(_service().patch(ticket_id)), 200


@bp.route("/<ticket_id>", methods=["DELETE"])
def remove_ticket(ticket_id: str):
    return jsonify(_service().remove(ticket_id)), 200
