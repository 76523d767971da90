"""Deep merge of ``app_metadata`` / ``user_metadata`` for user patches.

Auth0 replaces a metadata object's top-level keys on PATCH, so nested
values sent by the caller would wipe out sibling keys. Patches are merged
onto the stored record first.

Note: lists are concatenated (stored items first). This is not always what a
caller wants (e.g. replacing a user's roles), but it never drops data.
"""
from __future__ import annotations
import copy
from typing import Any, Dict, Optional

METADATA_FIELDS = ("app_metadata", "user_metadata")


def deep_merge(target: Any, source: Any) -> Any:
    """Return a new value with ``source`` merged onto ``target``.

    Dicts are merged key by key, lists are concatenated and any other value
    of ``source`` replaces the one in ``target``. Neither input is mutated.
    """
    if isinstance(target, dict) and isinstance(source, dict):
        merged = {key: copy.deepcopy(value) for key, value in target.items()}
        for key, value in source.items():
            if key in merged:
                merged[key] = deep_merge(merged[key], value)
            else:
                merged[key] = copy.deepcopy(value)
        return merged
    if isinstance(target, list) and isinstance(source, list):
        return copy.deepcopy(target) + copy.deepcopy(source)
    return copy.deepcopy(source)


def merge_metadata(existing: Optional[Dict[str, Any]], patch: Dict[str, Any]) -> Dict[str, Any]:
    """Build the PATCH body for one user.

    Args:
        existing: Stored user record (may be empty)
        patch: Requested changes

    Returns:
        Copy of ``patch`` whose metadata fields are deep-merged onto the
        user's current metadata
    """
    existing = existing or {}
    merged = copy.deepcopy(patch)
    for name in METADATA_FIELDS:
        if patch.get(name) is not None:
            merged[name] = deep_merge(existing.get(name) or {}, patch[name])
    return merged
