"""
Users Service Layer

Service verbs for the ``/auth0/users`` resource, independent of Flask:

    find(params)            search users with a Mongo-style filter
    get(id, params)         one user by user_id or email
    create(data, params)    new Username-Password-Authentication user
    update(...)             not supported by Auth0
    patch(id, data, params) one user, or every user matching params["query"] when id is None
    remove(id, params)      one user, or every user matching params["query"] when id is None

Every verb checks the Management API token scopes first and validates its
input before any remote call is made.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Union

from .bulk import apply_bulk, ensure_multi_allowed, enumerate_all
from .context import ServiceContext
from .errors import Forbidden, InvalidArgument, NotFound, OperationNotImplemented
from .lucene import convert
from .metadata import merge_metadata
from .sorting import sort_records
from .validators import is_email

logger = logging.getLogger(__name__)

CONNECTION = "Username-Password-Authentication"

EXTRA_FIELDS = ("user_metadata", "app_metadata", "given_name", "family_name", "name", "nickname", "picture")

UPDATABLE_FIELDS = (
    "connection",
    "client_id",
    "email",
    "email_confirmed",
    "email_verified",
    "verify_email",
    "password",
    "password_confirmed",
    "phone_number",
    "phone_number_confirmed",
    "verify_phone_number",
    "phone_verified",
    "user_metadata",
    "app_metadata",
    "username",
)

CONFIRMATION_FIELDS = ("email_confirmed", "password_confirmed", "phone_number_confirmed")

READ_SCOPES = ("read:users", "read:user_idp_tokens")
UPDATE_SCOPES = ("update:users", "update:users_app_metadata")


class UsersService:
    """Auth0 users exposed as a find/get/create/update/patch/remove service."""

    def __init__(self, context: ServiceContext):
        self.context = context

    @property
    def client(self):
        return self.context.client

    # ─────────────────────────────────────────────────────────────────────
    # Authorization
    # ─────────────────────────────────────────────────────────────────────
    def _require_read(self) -> None:
        if not self.context.scopes.has_any(*READ_SCOPES):
            raise Forbidden(
                "The token must have `read:users` or `read:user_idp_tokens` scope to call this endpoint"
            )

    def _require(self, scope: str) -> None:
        if not self.context.scopes.check_scope(scope):
            raise Forbidden(f"The token must have `{scope}` scope to call this endpoint")

    @staticmethod
    def _warn_ignored_params(method: str, params: Optional[Dict[str, Any]]) -> None:
        if params:
            logger.warning(
                "%s(): extra params %s are ignored; the fields returned for a single user cannot be restricted",
                method, sorted(params),
            )

    # ─────────────────────────────────────────────────────────────────────
    # Read
    # ─────────────────────────────────────────────────────────────────────
    def find(self, params: Optional[Dict[str, Any]] = None) -> Union[List[dict], Dict[str, Any]]:
        """Search users.

        Args:
            params: ``{"query": filters, "paginate": ...}``

        Returns:
            ``{"total", "limit", "skip", "data"}``, or the plain list of users
            when pagination is disabled

        Raises:
            Forbidden: Missing read scope
            InvalidArgument: Malformed filter
        """
        self._require_read()
        params = params or {}
        query = convert(self.context.paginate, params)
        result = self.client.get_users(query)

        if isinstance(result, dict):
            users = result.get("users", [])
        else:
            users = list(result or [])
            result = {"total": len(users), "limit": query["per_page"], "start": query["page"]}

        # Auth0 only sorted on the first key
        sort = (params.get("query") or {}).get("$sort")
        if isinstance(sort, dict) and len(sort) > 1:
            users = sort_records(users, sort)

        if params.get("paginate") is False or not self.context.paginate:
            return users
        return {
            "total": result.get("total"),
            "limit": result.get("limit"),
            "skip": result.get("start"),
            "data": users,
        }

    def get(self, id: str, params: Optional[Dict[str, Any]] = None) -> dict:
        """Return one user by ``user_id`` or email address ({} when not found).

        Raises:
            Forbidden: Missing read scope
        """
        self._require_read()
        self._warn_ignored_params("get", params)

        if is_email(id):
            users = self.client.get_users_by_email(id)
            return users[0] if users else {}
        return self.client.get_user(id) or {}

    # ─────────────────────────────────────────────────────────────────────
    # Write
    # ─────────────────────────────────────────────────────────────────────
    def create(self, data: Dict[str, Any], params: Optional[Dict[str, Any]] = None) -> dict:
        """Create a database-connection user.

        ``data`` holds ``email``/``email_confirmed``, ``pw``/``pw_confirmed``
        and optional ``extra`` profile fields.

        Raises:
            Forbidden: Missing ``create:users`` scope
            InvalidArgument: Bad email, weak or unconfirmed password, or
                extra fields that may not be set
        """
        self._require("create:users")
        self._warn_ignored_params("create", params)
        data = data or {}

        email = data.get("email")
        if not email or not is_email(email) or not data.get("email_confirmed") or email != data["email_confirmed"]:
            raise InvalidArgument("Email address was missing, malformed, or did not match confirmation")

        password = data.get("pw")
        if not password:
            raise InvalidArgument("You must provide a valid password.")
        quality = self.context.password_policy.test(password)
        if not quality.strong:
            raise InvalidArgument("Password is not strong enough", quality.errors)
        if not data.get("pw_confirmed") or password != data["pw_confirmed"]:
            raise InvalidArgument("The password and confirmation did not match.")

        new_user = {
            "email": email,
            "password": password,
            "connection": CONNECTION,
            "verify_email": True,
        }
        extra = data.get("extra") or {}
        if not isinstance(extra, dict):
            raise InvalidArgument("The extra data passed is malformed or not permitted.")
        for key, value in extra.items():
            if key not in EXTRA_FIELDS:
                raise InvalidArgument("The extra data passed is malformed or not permitted.")
            new_user[key] = value

        user = self.client.create_user(new_user)
        logger.info("Created user %s", user.get(self.context.id_field) if isinstance(user, dict) else email)
        return user

    def update(self, id: Any = None, data: Any = None, params: Any = None):
        """Auth0 cannot replace a user record; use patch()."""
        raise OperationNotImplemented(
            "The `auth0/users` service has no update() method. Use patch() instead."
        )

    def _validate_patch(self, id: Optional[str], data: Dict[str, Any]) -> Dict[str, Any]:
        """Check the requested changes and return the body to send."""
        body = dict(data)
        bulk = id is None

        for key in data:
            if key not in UPDATABLE_FIELDS:
                if key == "blocked":
                    raise InvalidArgument("Use the /auth0/blocks service to block/unblock a user.")
                raise InvalidArgument(f"The {key} cannot be updated.")

            if key == "password":
                if bulk:
                    raise Forbidden("Bulk password updates not allowed.")
                quality = self.context.password_policy.test(data["password"])
                if not quality.strong:
                    raise InvalidArgument("Password is not strong enough", quality.errors)
                if not data.get("password_confirmed") or data["password"] != data["password_confirmed"]:
                    raise InvalidArgument("The password and confirmation did not match.")
            elif key == "email":
                if bulk:
                    raise Forbidden("Bulk email updates not allowed.")
                if (
                    not is_email(data["email"])
                    or not data.get("email_confirmed")
                    or data["email"] != data["email_confirmed"]
                ):
                    raise InvalidArgument("Email address was malformed, or did not match confirmation")
                if not body.get("verify_email"):
                    body["verify_email"] = True
            elif key == "phone_number":
                if bulk:
                    raise Forbidden("Bulk phone number updates not allowed.")
                if not data.get("phone_number_confirmed") or data["phone_number"] != data["phone_number_confirmed"]:
                    raise InvalidArgument("Phone number confirmation was missing, or did not match")
                if not body.get("verify_phone_number"):
                    body["verify_phone_number"] = True
            elif key == "username" and bulk:
                raise Forbidden("Bulk username updates not allowed.")

        # confirmations are checked above, Auth0 does not accept them
        for key in CONFIRMATION_FIELDS:
            body.pop(key, None)
        return body

    def patch(self, id: Optional[str], data: Dict[str, Any], params: Optional[Dict[str, Any]] = None):
        """Update one user, or every user matching ``params["query"]`` when ``id`` is None.

        Metadata objects are deep-merged onto each user's stored metadata.

        Returns:
            The updated user, or the list of updated users for a bulk patch

        Raises:
            Forbidden: Missing update scope, bulk not enabled, or a field
                that may not be changed in bulk
            InvalidArgument: Field that cannot be updated or failed confirmation
            NotFound: No user matches ``id``
            UpstreamFailure: A bulk update failed (others may have succeeded)
        """
        if not self.context.scopes.has_any(*UPDATE_SCOPES):
            raise Forbidden(
                "The token must have `update:users` or `update:users_app_metadata` scope to call this endpoint"
            )
        body = self._validate_patch(id, data or {})

        if id is None:
            ensure_multi_allowed(self.context.multi, "patch", "Patching multiple users is not permitted.")
            users = enumerate_all(self.client, params)
            logger.info("Bulk patch of %d user(s), fields=%s", len(users), sorted(body))
            id_field = self.context.id_field
            return apply_bulk(
                users,
                lambda user: self.client.update_user(user[id_field], merge_metadata(user, body)),
                self.context.bulk_max_workers,
            )

        user = self.get(id)
        if not user:
            raise NotFound(f"No user found for id {id}")
        return self.client.update_user(user.get(self.context.id_field, id), merge_metadata(user, body))

    def remove(self, id: Optional[str], params: Optional[Dict[str, Any]] = None):
        """Delete one user, or every user matching ``params["query"]`` when ``id`` is None.

        Returns:
            The removed user, or the list of removed users

        Raises:
            Forbidden: Missing ``delete:users`` scope or bulk not enabled
            InvalidArgument: ``id`` is None and no query was given
            NotFound: No user matches ``id``
            UpstreamFailure: A bulk removal failed (others may have succeeded)
        """
        self._require("delete:users")
        params = params or {}
        id_field = self.context.id_field

        if id is None:
            if not params.get("query"):
                raise InvalidArgument("Removing users requires an id or a query.")
            ensure_multi_allowed(self.context.multi, "remove", "Removing multiple users is not permitted.")
            users = enumerate_all(self.client, params)
            logger.info("Bulk removal of %d user(s)", len(users))
            apply_bulk(
                users,
                lambda user: self.client.delete_user(user[id_field]),
                self.context.bulk_max_workers,
            )
            return users

        user = self.get(id)
        if not user:
            raise NotFound(f"No user found for id {id}")
        self.client.delete_user(user[id_field])
        return user
