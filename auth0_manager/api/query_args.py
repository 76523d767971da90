"""Parsing of bracket-notation query strings into filter dicts.

    ?email[$ne]=a@example.com&$sort[email]=1&$select[]=email&$or[0][name]=Doe&$limit=5

becomes

    {"email": {"$ne": "a@example.com"}, "$sort": {"email": "1"},
     "$select": ["email"], "$or": [{"name": "Doe"}], "$limit": "5"}

Range bounds are converted to numbers when they look like numbers, so
``logins_count[$gt]=10`` compares numerically. ``$limit``, ``$skip`` and
``$sort`` directions stay strings; the compiler accepts numeric strings.
"""
from __future__ import annotations
import re
from typing import Any, Dict, List

_KEY = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_PART = re.compile(r"\[([^\[\]]*)\]")
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")

RANGE_OPERATORS = ("$gt", "$gte", "$lt", "$lte")
LIST_OPERATORS = ("$in", "$nin")


def _number(text: str) -> Any:
    if not _NUMBER.fullmatch(text):
        return text
    return float(text) if "." in text else int(text)


def _split_key(key: str) -> List[str]:
    match = _KEY.match(key)
    if not match:
        return [key]
    return [match.group(1)] + _PART.findall(match.group(2))


def _assign(target: Dict[str, Any], path: List[str], values: List[str]) -> None:
    if len(path) > 1 and path[-1] == "":
        path, value = path[:-1], list(values)
    else:
        value = values[-1] if len(values) == 1 else list(values)

    for part in path[:-1]:
        child = target.get(part)
        if not isinstance(child, dict):
            child = target[part] = {}
        target = child
    target[path[-1]] = value


def _normalize(node: Any) -> Any:
    """Turn index-keyed dicts into lists and coerce operator values."""
    if not isinstance(node, dict):
        return node
    result = {}
    for key, value in node.items():
        value = _normalize(value)
        if key in RANGE_OPERATORS and isinstance(value, str):
            value = _number(value)
        elif key in LIST_OPERATORS and not isinstance(value, list):
            value = [value]
        result[key] = value
    if result and all(key.isdigit() for key in result):
        return [result[key] for key in sorted(result, key=int)]
    return result


def parse_query_args(args) -> Dict[str, Any]:
    """Build a filter dict from ``request.args`` (or any mapping).

    Repeated keys become lists. Keys appear in query-string order, which
    keeps the precedence of ``$sort`` fields.
    """
    parsed: Dict[str, Any] = {}
    for key in args:
        values = args.getlist(key) if hasattr(args, "getlist") else [args[key]]
        _assign(parsed, _split_key(key), values)
    normalized = _normalize(parsed)
    return normalized if isinstance(normalized, dict) else {}
