"""Client-side multi-key sorting of user records.

Auth0 sorts search results on a single field. When a ``$sort`` mapping names
several fields, the page returned by Auth0 is re-sorted here:

    sort_records(users, {"app_metadata.roles[0]": 1, "logins_count": -1})

Keys may be dotted paths with list indexes. Records missing a key always go
after the records that have it, whatever the direction.
"""
from __future__ import annotations
import re
from typing import Any, Dict, Iterable, List

from .errors import InvalidArgument

_PATH_TOKEN = re.compile(r"[^.\[\]]+|\[(\d+)\]")

_MISSING = object()


def get_path(obj: Any, path: str, default: Any = None) -> Any:
    """Safe nested lookup of ``path`` (``a.b[0].c``) in dicts and lists."""
    current = obj
    for match in _PATH_TOKEN.finditer(path):
        index, key = match.group(1), match.group(0)
        if index is not None:
            if not isinstance(current, (list, tuple)) or int(index) >= len(current):
                return default
            current = current[int(index)]
        elif isinstance(current, dict) and key in current:
            current = current[key]
        else:
            return default
    return current


def sort_records(collection: Iterable[dict], sort: Dict[str, Any]) -> List[dict]:
    """Return a new list sorted by every key of ``sort`` (1 asc, -1 desc).

    Key precedence follows the order of ``sort``. The sort is stable and
    ``collection`` is never mutated.
    """
    records = list(collection)
    # successive stable sorts, least significant key first
    for path, direction in reversed(list(sort.items())):
        if isinstance(direction, bool) or str(direction).strip() not in ("1", "-1"):
            raise InvalidArgument("The value for the $sort field must be either 1 or -1.")
        descending = int(str(direction).strip()) == -1
        present, missing = [], []
        for record in records:
            value = get_path(record, path, _MISSING)
            if value is _MISSING or value is None:
                missing.append(record)
            else:
                present.append((value, record))
        present.sort(key=lambda pair: _sort_key(pair[0]), reverse=descending)
        records = [record for _, record in present] + missing
    return records


def _sort_key(value: Any) -> tuple:
    # numbers before strings; anything else compared by its text
    if isinstance(value, bool):
        return (0, int(value), "")
    if isinstance(value, (int, float)):
        return (0, value, "")
    if isinstance(value, str):
        return (1, 0, value)
    return (2, 0, str(value))
