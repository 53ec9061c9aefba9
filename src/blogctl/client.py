"""Thin JSON API client over a :class:`~blogctl.transport.Transport`."""

from __future__ import annotations

import logging
from typing import Any

from blogctl.config import BlogctlConfig
from blogctl.errors import normalize_error
from blogctl.strategies import with_verb_fallback
from blogctl.transport import Response, Transport, TransportFailure, UrllibTransport

logger = logging.getLogger(__name__)


class ApiClient:
    """Client for the blog service's REST API.

    Resolves configured paths against the base URL, attaches the bearer
    token when one is given and turns every failed call into an
    :class:`~blogctl.errors.OperationError`.
    """

    def __init__(self, config: BlogctlConfig, transport: Transport | None = None) -> None:
        self.config = config
        self.transport = transport or UrllibTransport(timeout=config.api.timeout)

    def url(self, path: str) -> str:
        return self.config.url(path)

    def request(
        self,
        method: str,
        path: str,
        data: dict | None = None,
        *,
        token: str | None = None,
    ) -> Any:
        """Make a request and return the decoded body of a 2xx response.

        Raises:
            OperationError: For transport failures and non-2xx statuses.
        """
        url = self.url(path)
        headers = {"Authorization": f"Bearer {token}"} if token else {}

        try:
            response: Response = self.transport.request(method, url, data, headers)
        except TransportFailure as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise normalize_error(None, exc) from exc

        if not response.ok:
            error = normalize_error(response)
            logger.info("%s %s returned %s: %s", method, url, response.status, error.message)
            raise error
        return response.body

    def execute_mutation(
        self,
        path: str,
        payload: dict,
        primary_verb: str,
        fallback_verb: str,
        *,
        token: str | None = None,
    ) -> Any:
        """Apply a change, falling back to a second verb if the first 404s.

        At most two requests are made, both against the same URL with the
        same payload.
        """
        return with_verb_fallback(
            lambda verb: self.request(verb, path, payload, token=token),
            primary_verb,
            fallback_verb,
        )
