"""Tickets service: password reset tickets and verification emails."""
from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from .context import ServiceContext
from .errors import Forbidden, InvalidArgument, OperationNotImplemented

logger = logging.getLogger(__name__)

TICKET_TYPES = ("email_verification", "password_reset")


def _not_implemented(method: str) -> OperationNotImplemented:
    return OperationNotImplemented(
        f"The `auth0/tickets` service has no {method}() method. "
        "Use create(data, {'type': 'email_verification|password_reset'}) instead."
    )


class TicketsService:
    """Create-only service for Auth0 user tickets."""

    def __init__(self, context: ServiceContext):
        self.context = context

    def create(self, data: Dict[str, Any], params: Optional[Dict[str, Any]] = None) -> str:
        """Create a ticket for ``data["user_id"]``.

        ``params["type"]`` is ``password_reset`` (password change ticket) or
        anything else, which (re)sends the verification email.

        Returns:
            "ok"

        Raises:
            Forbidden: Missing ``create:user_tickets`` scope
            InvalidArgument: Missing ticket type or user_id
        """
        if not self.context.scopes.check_scope("create:user_tickets"):
            raise Forbidden("The token must have `create:user_tickets` scope to call this endpoint")
        params = params or {}
        data = data or {}

        ticket_type = params.get("type")
        if not ticket_type:
            raise InvalidArgument(
                "You must specify what kind of ticket to create (email_verification or password_reset)."
            )
        if not data.get("user_id"):
            raise InvalidArgument("You must provide a valid user_id.")

        if ticket_type == "password_reset":
            self.context.client.create_password_change_ticket(data)
        else:
            self.context.client.send_email_verification(data)
        logger.info("Created %s ticket for %s", ticket_type, data["user_id"])
        return "ok"

    def find(self, params: Any = None):
        raise _not_implemented("find")

    def get(self, id: Any = None, params: Any = None):
        raise _not_implemented("get")

    def update(self, id: Any = None, data: Any = None, params: Any = None):
        raise _not_implemented("update")

    def patch(self, id: Any = None, data: Any = None, params: Any = None):
        raise _not_implemented("patch")

    def remove(self, id: Any = None, params: Any = None):
        raise _not_implemented("remove")
