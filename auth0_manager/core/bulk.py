"""Multi-record patch/remove support.

A bulk call first enumerates every user matching the filter, page by page,
then fans the per-user call out over a thread pool. The fan-out is best
effort: the first failure is reported as soon as it is seen, and calls
already running (or queued) are not cancelled, so some users may have been
changed when the caller receives the error.
"""
from __future__ import annotations
import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from .errors import Forbidden, UpstreamFailure
from .lucene import MAX_PER_PAGE, SEARCH_ENGINE, convert

DEFAULT_MAX_WORKERS = 10

Multi = Union[bool, Sequence[str], None]

logger = logging.getLogger(__name__)


def enumerate_all(client, params: Optional[Dict[str, Any]] = None) -> List[dict]:
    """Fetch every user matching ``params["query"]``.

    Pages of up to 100 users are requested until one comes back short.

    Args:
        client: Record store providing ``get_users(query)``
        params: Service params holding the filter under ``query``

    Returns:
        All matching users, in the order Auth0 returned them
    """
    params = dict(params or {})
    params["paginate"] = False
    query = convert(False, params, {"per_page": MAX_PER_PAGE, "page": 0, "search_engine": SEARCH_ENGINE})

    users: List[dict] = []
    while True:
        result = client.get_users(dict(query))
        page = result.get("users", []) if isinstance(result, dict) else list(result or [])
        users.extend(page)
        if len(page) < query["per_page"]:
            break
        query["page"] += 1
    logger.debug("Enumerated %d users over %d page(s)", len(users), query["page"] + 1)
    return users


def apply_bulk(
    records: Iterable[dict],
    operation: Callable[[dict], Any],
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> List[Any]:
    """Run ``operation`` on every record concurrently.

    Args:
        records: Records to process
        operation: Callable invoked once per record
        max_workers: Thread pool size

    Returns:
        Results of ``operation``, in the order of ``records``

    Raises:
        UpstreamFailure: As soon as one operation fails
    """
    records = list(records)
    if not records:
        return []

    executor = ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(records))))
    try:
        futures = [executor.submit(operation, record) for record in records]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in futures:
            if future in done and future.exception() is not None:
                exc = future.exception()
                logger.error(
                    "Bulk operation failed (%d/%d settled): %s",
                    len(done), len(futures), exc,
                )
                if isinstance(exc, UpstreamFailure):
                    raise exc
                raise UpstreamFailure(f"Bulk operation failed: {exc}") from exc
        return [future.result() for future in futures]
    finally:
        # in-flight siblings keep running after a failure
        executor.shutdown(wait=False)


def ensure_multi_allowed(multi: Multi, method: str, message: Optional[str] = None) -> None:
    """Check that multi-record ``method`` calls are enabled for a service.

    ``multi`` is True (all methods) or a list of allowed method names.

    Raises:
        Forbidden: If ``method`` is not allowed on multiple records
    """
    if multi is True:
        return
    if isinstance(multi, (list, tuple, set, frozenset)) and method in multi:
        return
    raise Forbidden(message or f"Calling {method} on multiple records is not permitted.")
