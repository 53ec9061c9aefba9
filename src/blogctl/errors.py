"""Uniform error type for every failed remote operation.

All shape-sniffing of backend error bodies lives here. Other modules never
look inside a failed response; they hand it to :func:`normalize_error` and
raise the result.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from blogctl.transport import Response

GENERIC_MESSAGE = "Request failed"

# Message the backend returns for a wrong email/password pair. When a login
# fails with it, callers suggest bootstrapping an administrator.
INVALID_CREDENTIALS_SIGNATURE = "Invalid email or password"


class ErrorKind(StrEnum):
    """Classification of a failed operation."""

    UNREACHABLE = "unreachable"
    AUTHENTICATION_REJECTED = "authentication_rejected"
    UNAUTHENTICATED = "unauthenticated"
    NO_VIABLE_ENDPOINT = "no_viable_endpoint"
    REMOTE_REJECTED = "remote_rejected"
    MALFORMED_RESPONSE = "malformed_response"


class OperationError(Exception):
    """A failed operation, ready for display."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message or GENERIC_MESSAGE
        self.http_status = http_status

    @property
    def is_not_found(self) -> bool:
        return self.http_status == 404

    def __repr__(self) -> str:
        return (
            f"OperationError(kind={self.kind.value!r}, message={self.message!r}, "
            f"http_status={self.http_status!r})"
        )


def _body_message(body: Any) -> str:
    if not isinstance(body, dict):
        return GENERIC_MESSAGE
    for field in ("message", "error"):
        value = body.get(field)
        if isinstance(value, str) and value.strip():
            return value
    return GENERIC_MESSAGE


def normalize_error(
    response: Response | None,
    failure: BaseException | str | None = None,
) -> OperationError:
    """Convert a failed remote call into an :class:`OperationError`.

    Args:
        response: The non-2xx response, or None when nothing came back.
        failure: The transport error (or its description) when no
            response was received.

    Returns:
        The normalized error. This function never raises.
    """
    if response is None:
        try:
            description = str(failure) if failure is not None else ""
        except Exception:
            description = ""
        return OperationError(
            ErrorKind.UNREACHABLE,
            description.strip() or GENERIC_MESSAGE,
        )

    status = getattr(response, "status", None)
    if isinstance(status, bool) or not isinstance(status, int):
        status = None
    try:
        message = _body_message(getattr(response, "body", None))
    except Exception:
        message = GENERIC_MESSAGE
    return OperationError(ErrorKind.REMOTE_REJECTED, message, status)


def authentication_rejected(message: str | None = None) -> OperationError:
    return OperationError(
        ErrorKind.AUTHENTICATION_REJECTED,
        message or "Login failed - no token received",
    )


def unauthenticated() -> OperationError:
    return OperationError(
        ErrorKind.UNAUTHENTICATED,
        "Not logged in. Run `blogctl login` first.",
    )


def no_viable_endpoint(last: OperationError | None) -> OperationError:
    """Error raised when every candidate endpoint reported 404."""
    if last is None:
        return OperationError(
            ErrorKind.NO_VIABLE_ENDPOINT, "No candidate endpoints configured"
        )
    return OperationError(ErrorKind.NO_VIABLE_ENDPOINT, last.message, last.http_status)


def malformed_response(what: str) -> OperationError:
    return OperationError(
        ErrorKind.MALFORMED_RESPONSE,
        f"Unexpected response shape: {what}",
    )


def suggests_bootstrap(error: OperationError) -> bool:
    """True when a login failure looks like "no such administrator"."""
    return INVALID_CREDENTIALS_SIGNATURE in error.message
