"""Sequential fallback strategies.

Both strategies are independent of the transport: they take a callable that
performs one attempt and raises :class:`OperationError` on failure, so
they can be driven by scripted outcomes in tests. Attempts run strictly
one after another; the outcome of attempt N decides whether attempt N+1
happens at all.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from blogctl.errors import OperationError, no_viable_endpoint

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_missing(error: OperationError) -> bool:
    return error.is_not_found


@dataclass
class ProbeResult(Generic[T]):
    """The candidate that answered and what it returned."""

    candidate: str
    value: T


def probe_endpoints(
    candidates: Sequence[str],
    attempt: Callable[[str], T],
    *,
    is_missing: Callable[[OperationError], bool] = _is_missing,
) -> ProbeResult[T]:
    """Try candidates in order until one succeeds.

    A candidate that reports "does not exist" (404 by default) is skipped.
    Any other failure means the endpoint exists and rejected the request,
    so it is raised immediately and later candidates are never tried.

    Args:
        candidates: Endpoint identifiers in the order to try them.
        attempt: Performs the call against one candidate.
        is_missing: Decides whether a failure means "try the next one".

    Returns:
        The first successful candidate and its result.

    Raises:
        OperationError: The first non-missing failure, or a
            ``NO_VIABLE_ENDPOINT`` error once every candidate is exhausted.
    """
    last_error: OperationError | None = None

    for candidate in candidates:
        logger.info("Trying endpoint: %s", candidate)
        try:
            value = attempt(candidate)
        except OperationError as exc:
            if not is_missing(exc):
                logger.info("Endpoint %s rejected the request: %s", candidate, exc.message)
                raise
            logger.info("Endpoint %s not found, trying next candidate", candidate)
            last_error = exc
            continue
        logger.info("Success with endpoint: %s", candidate)
        return ProbeResult(candidate=candidate, value=value)

    raise no_viable_endpoint(last_error)


def with_verb_fallback(
    attempt: Callable[[str], T],
    primary_verb: str,
    fallback_verb: str,
) -> T:
    """Run ``attempt`` with the primary verb, retrying once on 404.

    Only a 404 from the primary verb triggers the retry. Every other
    failure, including a 404 from the fallback verb, propagates.
    """
    try:
        return attempt(primary_verb)
    except OperationError as exc:
        if not exc.is_not_found:
            raise
        logger.info("%s returned 404, retrying with %s", primary_verb, fallback_verb)
    return attempt(fallback_verb)
