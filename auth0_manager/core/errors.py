"""Error taxonomy shared by the query compiler, the services and the API layer.

Every error carries a human-readable message, an HTTP-ish status code used by
the Flask error handler, and optional structured ``data`` (for example the
list of password-strength violations).
"""
from __future__ import annotations
from typing import Any, Optional


class ManagerError(Exception):
    """Base exception for all user-management operations."""

    status = 500
    name = "GeneralError"

    def __init__(self, message: str = "", data: Optional[Any] = None):
        self.message = message or self.__class__.__doc__.strip().splitlines()[0]
        self.data = data
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert to the JSON error body returned by the API."""
        body = {
            "name": self.name,
            "message": self.message,
            "code": self.status,
        }
        if self.data is not None:
            body["data"] = self.data
        return body


class InvalidConfig(ManagerError):
    """Configuration is inconsistent (e.g. pagination default above max)."""

    status = 500
    name = "InvalidConfig"


class InvalidArgument(ManagerError):
    """Request parameters or payload are malformed."""

    status = 400
    name = "BadRequest"


class Forbidden(ManagerError):
    """Missing scope or disallowed bulk operation."""

    status = 403
    name = "Forbidden"


class NotFound(ManagerError):
    """No record matches the given id."""

    status = 404
    name = "NotFound"


class OperationNotImplemented(ManagerError):
    """The service does not support this method."""

    status = 501
    name = "NotImplemented"


class UpstreamFailure(ManagerError):
    """The remote record store rejected the call."""

    status = 502
    name = "UpstreamFailure"
