"""Session and admin-bootstrap models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Session(BaseModel):
    """Authenticated identity held for the duration of a login.

    ``token`` and ``admin`` are either both set or both None.
    """

    token: str | None = None
    admin: dict[str, Any] | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None and self.admin is not None


class Credentials(BaseModel):
    email: str
    password: str


class BootstrapResult(BaseModel):
    """Outcome of creating the first administrator."""

    endpoint: str
    credentials: Credentials
    session_started: bool = False


class AdminStatus(BaseModel):
    """Administrators currently registered on the backend."""

    count: int = 0
    admins: list[dict[str, Any]] = Field(default_factory=list)
