"""HTTP transport used by the API client.

The client only needs "send a JSON request, get back a status and a JSON
body". :class:`UrllibTransport` does that with ``urllib.request``;
tests substitute any object with the same ``request`` method.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request
from typing import Any, Protocol

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class Response(BaseModel):
    """A response that made it back from the server, any status."""

    status: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class TransportFailure(Exception):
    """No usable response was received (connection refused, timeout, garbled reply)."""


class Transport(Protocol):
    def request(
        self,
        method: str,
        url: str,
        body: dict | None = None,
        headers: dict[str, str] | None = None,
    ) -> Response: ...


def _decode_body(raw: bytes) -> Any:
    if not raw:
        return {}
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return {}


class UrllibTransport:
    """JSON-over-HTTP transport built on ``urllib.request``."""

    def __init__(self, timeout: float = 30.0) -> None:
        self.timeout = timeout

    def request(
        self,
        method: str,
        url: str,
        body: dict | None = None,
        headers: dict[str, str] | None = None,
    ) -> Response:
        data = json.dumps(body).encode("utf-8") if body is not None else None
        req = urllib.request.Request(
            url,
            data=data,
            method=method,
            headers={"Content-Type": "application/json", **(headers or {})},
        )

        logger.debug("%s %s", method, url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return Response(status=resp.status, body=_decode_body(resp.read()))
        except urllib.error.HTTPError as exc:
            # Non-2xx statuses still carry a body worth reading.
            try:
                raw = exc.read()
            except (OSError, http.client.HTTPException):
                raw = b""
            return Response(status=exc.code, body=_decode_body(raw))
        except urllib.error.URLError as exc:
            raise TransportFailure(str(exc.reason)) from exc
        except (TimeoutError, OSError, http.client.HTTPException) as exc:
            # Covers malformed status lines and bodies cut short mid-read.
            raise TransportFailure(str(exc) or exc.__class__.__name__) from exc
