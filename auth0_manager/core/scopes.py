"""Management API scope tracking and authorization checks.

The scopes granted to the Management API token are held in a single
``ScopeStore`` owned by the application. The store is filled at startup
(``ensure_scopes``) and only ever replaced as a whole, so services read it
without locking.
"""
from __future__ import annotations
import logging
from typing import FrozenSet, Iterable, Optional

import jwt

from .errors import UpstreamFailure

logger = logging.getLogger(__name__)


class ScopeStore:
    """Process-wide cell holding the granted scope set."""

    def __init__(self, scopes: Optional[Iterable[str]] = None):
        self._scopes: Optional[FrozenSet[str]] = frozenset(scopes) if scopes is not None else None

    def current(self) -> Optional[FrozenSet[str]]:
        return self._scopes

    def replace(self, scopes: Optional[Iterable[str]]) -> None:
        """Swap in a new scope set (None clears it)."""
        self._scopes = frozenset(scopes) if scopes is not None else None

    def refresh(self, client) -> FrozenSet[str]:
        """Read the scopes from a fresh access token of ``client``."""
        scopes = scopes_from_token(client.get_access_token())
        self.replace(scopes)
        logger.info("Management API scopes loaded (%d scopes)", len(scopes))
        return self._scopes


def scopes_from_token(token: str) -> list[str]:
    """Return the ``scope`` claim of an access token as a list.

    The token comes straight from the token endpoint, so its signature is
    not verified here.
    """
    claims = jwt.decode(token, options={"verify_signature": False})
    return claims.get("scope", "").split()


def ensure_scopes(store: ScopeStore, client) -> None:
    """Populate ``store`` from the client's token unless it is already set.

    Raises:
        UpstreamFailure: If no token could be obtained or decoded
    """
    if store.current() is not None:
        return
    try:
        store.refresh(client)
    except Exception as exc:
        raise UpstreamFailure("Could not get access token and set scopes.", str(exc)) from exc


class ScopeGate:
    """Per-service authorization check against the shared ``ScopeStore``."""

    def __init__(self, store: ScopeStore):
        self.store = store
        self.scopes = store.current()

    def check_scope(self, scope: str) -> bool:
        """Return True if ``scope`` has been granted. Never raises."""
        if self.scopes and scope in self.scopes:
            return True
        # the store may have been refreshed since this gate was created
        self.scopes = self.store.current()
        return bool(self.scopes and scope in self.scopes)

    def has_any(self, *scopes: str) -> bool:
        return any(self.check_scope(scope) for scope in scopes)
