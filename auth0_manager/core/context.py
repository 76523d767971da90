"""Shared state injected into the user and ticket services."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from .bulk import DEFAULT_MAX_WORKERS, Multi
from .lucene import Pagination
from .scopes import ScopeGate
from .validators import PasswordPolicy


@dataclass
class ServiceContext:
    """Collaborators and policies of one service.

    Attributes:
        client: Record store (``ManagementClient`` or a compatible object)
        scopes: Scope check backed by the application's ``ScopeStore``
        paginate: App-wide pagination policy, or False/None when disabled
        multi: True, False, or the list of methods allowed on multiple records
        password_policy: Strength test for new passwords
        bulk_max_workers: Thread pool size for bulk patch/remove
        id_field: Key holding the record id
    """

    client: Any
    scopes: ScopeGate
    paginate: Pagination = None
    multi: Multi = False
    password_policy: PasswordPolicy = field(default_factory=PasswordPolicy)
    bulk_max_workers: int = DEFAULT_MAX_WORKERS
    id_field: str = "user_id"
