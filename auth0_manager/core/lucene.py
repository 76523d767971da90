"""Conversion of Feathers/Mongo-style query params into Auth0 search requests.

The Auth0 user search endpoint takes a flat request object whose ``q`` field
is written in Lucene query syntax. ``convert()`` builds that object from a
filter dict through a fixed pipeline of pure stages, each receiving and
returning a ``QueryState``:

    paging -> sorting -> selecting -> parsing -> extracting

Usage:
    query = convert(
        {"default": 10, "max": 50},
        {"query": {"email": "a@example.com", "$sort": {"email": 1}}},
    )
    # {'per_page': 10, 'page': 0, 'include_totals': True, 'search_engine': 'v3',
    #  'sort': 'email:1', 'q': '((email:"a@example.com"))'}

Values are sent as quoted phrases with ``"`` and ``\\`` escaped. A value
containing ``*`` is sent unquoted as a wildcard term, with every other
Lucene special character escaped.

See https://lucene.apache.org/core/2_9_4/queryparsersyntax.html for the
query syntax.
"""
from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .errors import InvalidArgument, InvalidConfig

# Auth0 never returns more than 100 records per page
MAX_PER_PAGE = 100

SEARCH_ENGINE = "v3"

RESERVED_KEYS = ("$limit", "$skip", "$sort", "$select")

_SORT_DIRECTION = re.compile(r"^-?1$")

Pagination = Union[Dict[str, int], bool, None]


def default_query() -> Dict[str, Any]:
    """Base Auth0 request; 50 is the Auth0 default page size."""
    return {
        "per_page": 50,
        "page": 0,
        "include_totals": True,
        "search_engine": SEARCH_ENGINE,
    }


@dataclass
class QueryState:
    """The ``{params, query}`` pair handed from one stage to the next."""

    params: Dict[str, Any]
    query: Dict[str, Any] = field(default_factory=default_query)

    @property
    def filters(self) -> Dict[str, Any]:
        return self.params.get("query") or {}


def _as_int(value: Any) -> Optional[int]:
    """Integer value of ``value`` (numeric strings allowed), or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and re.fullmatch(r"\s*-?\d+\s*", value):
        return int(value)
    return None


def paging(
    pagination: Pagination,
    params: Optional[Dict[str, Any]] = None,
    query: Optional[Dict[str, Any]] = None,
) -> QueryState:
    """Resolve the page size and page number of the request.

    Args:
        pagination: App-wide pagination ({"default": n, "max": m}), or False/None
            when pagination is disabled
        params: Params passed to the service method; ``params["paginate"]``
            overrides ``pagination``
        query: Base Auth0 request (defaults to ``default_query()``)

    Returns:
        QueryState with ``per_page`` and ``page`` set

    Raises:
        InvalidConfig: If the pagination default is greater than its max
        InvalidArgument: If ``$limit`` or ``$skip`` is malformed
    """
    params = dict(params) if params is not None else {}
    if "paginate" not in params:
        params["paginate"] = pagination
    query = dict(query) if query is not None else default_query()
    paginate = params["paginate"]
    filters = params.get("query") or {}

    enabled = isinstance(paginate, dict)
    if enabled:
        default, maximum = paginate.get("default"), paginate.get("max")
        if default is not None and maximum is not None and default > maximum:
            raise InvalidConfig("Max results per page should not be greater than default.", dict(paginate))

    limit = filters.get("$limit")
    if limit is not None:
        limit = _as_int(limit)
        if limit is None:
            raise InvalidArgument("$limit must be an integer value")

    if not enabled:
        # pagination explicitly turned off; use $limit below the Auth0 max
        query["per_page"] = limit if limit is not None and limit < MAX_PER_PAGE else MAX_PER_PAGE
    else:
        if default is not None:
            query["per_page"] = min(default, MAX_PER_PAGE)
        # $limit overrides the default but never the max
        if limit is not None:
            per_page = maximum if maximum and limit > maximum else limit
            query["per_page"] = min(per_page, MAX_PER_PAGE)
    query["per_page"] = max(query["per_page"], 1)

    skip = filters.get("$skip")
    if skip is not None:
        skip = _as_int(skip)
        if skip is None or skip < 0:
            raise InvalidArgument("$skip must be an integer value >= 0")
    query["page"] = skip or 0

    return QueryState(params=params, query=query)


def sorting(state: QueryState) -> QueryState:
    """Add the first ``$sort`` field to the request.

    Auth0 sorts on one field only; further keys are applied client-side
    after the results arrive (see ``sorting.sort_records``).
    """
    sort = state.filters.get("$sort")
    if sort:
        if not isinstance(sort, dict):
            raise InvalidArgument("$sort must map field names to 1 or -1.")
        # every direction is checked, the later keys are sorted client-side
        for direction in sort.values():
            if isinstance(direction, bool) or not _SORT_DIRECTION.match(str(direction).strip()):
                raise InvalidArgument("The value for the $sort field must be either 1 or -1.")
        field_name, direction = next(iter(sort.items()))
        state.query["sort"] = f"{field_name}:{int(str(direction).strip())}"
    return state


def selecting(state: QueryState) -> QueryState:
    """Add the comma-separated ``$select`` fields to the request."""
    select = state.filters.get("$select")
    if select:
        state.query["fields"] = select if isinstance(select, str) else ",".join(select)
    return state


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _lower_than(lower: Any, upper: Any) -> bool:
    numeric = (int, float)
    if (
        isinstance(lower, numeric) and isinstance(upper, numeric)
        and not isinstance(lower, bool) and not isinstance(upper, bool)
    ):
        return lower < upper
    return _text(lower) < _text(upper)


_RANGE_SPECIAL = re.compile(r'([\s\[\]{}"\\])')


def _bound(value: Any) -> str:
    return _RANGE_SPECIAL.sub(r"\\\1", _text(value))


def _range_clauses(ops: Dict[str, Any]) -> List[str]:
    subs = []
    has_lower = "$gt" in ops or "$gte" in ops
    has_upper = "$lt" in ops or "$lte" in ops

    # one-sided ranges
    if "$gt" in ops and not has_upper:
        subs.append(f"({{{_bound(ops['$gt'])} TO *}})")
    if "$gte" in ops and not has_upper:
        subs.append(f"([{_bound(ops['$gte'])} TO *])")
    if "$lt" in ops and not has_lower:
        subs.append(f"({{* TO {_bound(ops['$lt'])}}})")
    if "$lte" in ops and not has_lower:
        subs.append(f"([* TO {_bound(ops['$lte'])}])")

    # two-sided ranges; an inverted interval becomes the union of both half-lines
    for lower_op, upper_op in (("$gt", "$lt"), ("$gt", "$lte"), ("$gte", "$lt"), ("$gte", "$lte")):
        if lower_op not in ops or upper_op not in ops:
            continue
        lower, upper = _bound(ops[lower_op]), _bound(ops[upper_op])
        lower_open, lower_close = ("{", "}") if lower_op == "$gt" else ("[", "]")
        upper_open, upper_close = ("{", "}") if upper_op == "$lt" else ("[", "]")
        if _lower_than(ops[lower_op], ops[upper_op]):
            subs.append(f"({lower_open}{lower} TO {upper}{upper_close})")
        else:
            subs.append(
                f"({upper_open}* TO {upper}{upper_close} OR {lower_open}{lower} TO *{lower_close})"
            )
    return subs


_WILDCARD_SPECIAL = re.compile(r'([+\-&|!(){}\[\]^"~:\\/\s])')


def _wildcard(text: str) -> str:
    """``text`` as an unquoted term; only ``*`` and ``?`` keep their meaning."""
    return _WILDCARD_SPECIAL.sub(r"\\\1", text)


def _quoted(value: Any) -> str:
    """``value`` as a Lucene phrase, with quotes and backslashes escaped."""
    return '"' + _text(value).replace("\\", "\\\\").replace('"', '\\"') + '"'


def _value_list(key: str, operator: str, values: Any) -> List[Any]:
    if not isinstance(values, (list, tuple)) or not values:
        raise InvalidArgument(f"The {operator} value for the {key} field must be a non-empty list.")
    return list(values)


def _field_clause(key: str, value: Any) -> str:
    if isinstance(value, dict):
        subs = []
        if "$ne" in value:
            subs.append(f'(NOT {_quoted(value["$ne"])})')
        if "$in" in value:
            subs.append("(" + " OR ".join(_quoted(v) for v in _value_list(key, "$in", value["$in"])) + ")")
        if "$nin" in value:
            subs.append(
                "(NOT " + " AND NOT ".join(_quoted(v) for v in _value_list(key, "$nin", value["$nin"])) + ")"
            )
        subs.extend(_range_clauses(value))
        if not subs:
            raise InvalidArgument(f"No supported query operator was given for the {key} field.")
        expression = "(" + " AND ".join(subs) + ")" if len(subs) > 1 else subs[0]
        return f"({key}:{expression})"

    if value is not None and not isinstance(value, (str, int, float)):
        raise InvalidArgument(
            f"The value for the {key} field must be a single value or an operator object; use $in for lists."
        )
    text = _text(value)
    # a * makes it a wildcard expression, which must not be quoted
    return f"({key}:{_wildcard(text)})" if "*" in text else f"({key}:{_quoted(value)})"


def parse(pieces: List[str], key: str, value: Any) -> List[str]:
    """Append the Lucene clause for one filter entry to ``pieces``.

    Args:
        pieces: Accumulated clauses, later joined with `` AND ``
        key: Field name, ``$or``, or a reserved key (ignored)
        value: Scalar, operator dict, or (for ``$or``) a list of filter dicts

    Returns:
        ``pieces``
    """
    if key == "$or":
        if (
            not isinstance(value, (list, tuple))
            or not value
            or not all(isinstance(sub_filter, dict) and sub_filter for sub_filter in value)
        ):
            raise InvalidArgument("$or must be a list of filter objects.")
        subs = []
        for sub_filter in value:
            sub_pieces: List[str] = []
            for sub_key, sub_value in sub_filter.items():
                parse(sub_pieces, sub_key, sub_value)
            subs.append(" AND ".join(sub_pieces))
        pieces.append("(" + ") OR (".join(subs) + ")")
    elif key not in RESERVED_KEYS:
        pieces.append(_field_clause(key, value))
    return pieces


def parsing(state: QueryState) -> QueryState:
    """Compile the filter fields into the Lucene ``q`` parameter."""
    if state.params.get("query") is not None:
        pieces: List[str] = []
        for key, value in state.params["query"].items():
            parse(pieces, key, value)
        q = "(" + " AND ".join(pieces) + ")"
        if q != "()":
            state.query["q"] = q
    return state


def extracting(state: QueryState) -> Dict[str, Any]:
    """Unwrap the finished request from its pipeline state."""
    return state.query


def convert(
    pagination: Pagination,
    params: Optional[Dict[str, Any]] = None,
    query: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Convert service params into an Auth0 user search request.

    Args:
        pagination: App-wide pagination settings, or False/None
        params: Params passed to the service method
        query: Base Auth0 request

    Returns:
        The Auth0 request (``page``, ``per_page``, ``include_totals``,
        ``search_engine`` and optionally ``q``, ``sort``, ``fields``)
    """
    state = paging(pagination, params, query)
    for stage in (sorting, selecting, parsing):
        state = stage(state)
    return extracting(state)
