"""Shared fakes: a scripted transport and an in-memory blog backend."""

from __future__ import annotations

import itertools
from collections import deque
from datetime import datetime, timezone

import pytest

from blogctl.blogs import BlogSynchronizer
from blogctl.client import ApiClient
from blogctl.config import BlogctlConfig
from blogctl.session import MemorySessionStore, SessionManager
from blogctl.transport import Response, TransportFailure

BASE = "http://api.test/api"


class ScriptedTransport:
    """Returns queued outcomes in order and records every request.

    An outcome is a ``Response``, a ``(status, body)`` tuple or an
    exception instance to raise.
    """

    def __init__(self, *outcomes) -> None:
        self.outcomes = deque(outcomes)
        self.calls: list[tuple[str, str, dict | None, dict]] = []

    def request(self, method, url, body=None, headers=None):
        self.calls.append((method, url, body, dict(headers or {})))
        if not self.outcomes:
            raise AssertionError(f"Unexpected request: {method} {url}")
        outcome = self.outcomes.popleft()
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, tuple):
            return Response(status=outcome[0], body=outcome[1])
        return outcome

    @property
    def methods(self) -> list[str]:
        return [c[0] for c in self.calls]

    @property
    def urls(self) -> list[str]:
        return [c[1] for c in self.calls]


class FakeBlogBackend:
    """In-memory stand-in for the blog service's REST API.

    Supports login, blog CRUD, PATCH-or-PUT publishing (``patch_supported``)
    and a configurable set of admin-creation routes.
    """

    def __init__(
        self,
        *,
        email: str = "admin@example.com",
        password: str = "secret",
        patch_supported: bool = True,
        admin_routes: tuple[str, ...] = (),
        reachable: bool = True,
    ) -> None:
        self.email = email
        self.password = password
        self.patch_supported = patch_supported
        self.admin_routes = admin_routes
        self.reachable = reachable
        self.token = "tok-123"
        self.blogs: dict[str, dict] = {}
        self.calls: list[tuple[str, str]] = []
        self._ids = itertools.count(1)

    def seed(self, **fields) -> str:
        blog_id = f"b{next(self._ids)}"
        self.blogs[blog_id] = {
            "_id": blog_id,
            "title": fields.get("title", "Untitled"),
            "slug": fields.get("slug", f"post-{blog_id}"),
            "content": fields.get("content", ""),
            "thumbnail": fields.get("thumbnail", ""),
            "tags": fields.get("tags", []),
            "published": fields.get("published", False),
            "createdAt": datetime(2026, 1, 1, tzinfo=timezone.utc).isoformat(),
        }
        return blog_id

    def _authorized(self, headers: dict) -> bool:
        return headers.get("Authorization") == f"Bearer {self.token}"

    def request(self, method, url, body=None, headers=None):
        self.calls.append((method, url))
        if not self.reachable:
            raise TransportFailure("Connection refused")
        headers = headers or {}
        path = url.removeprefix(BASE)

        if path == "/auth/login" and method == "POST":
            if body == {"email": self.email, "password": self.password}:
                return Response(
                    status=200,
                    body={"success": True, "token": self.token, "admin": {"email": self.email}},
                )
            return Response(status=401, body={"success": False, "message": "Invalid email or password"})

        if path in self.admin_routes and method == "POST":
            self.email, self.password = body["email"], body["password"]
            return Response(status=201, body={"success": True})

        if path == "/blogs":
            if method == "GET":
                return Response(status=200, body={"success": True, "blogs": list(self.blogs.values())})
            if method == "POST":
                if not self._authorized(headers):
                    return Response(status=401, body={"message": "No token provided"})
                blog_id = self.seed(**body)
                return Response(status=201, body={"success": True, "blog": self.blogs[blog_id]})

        if path.startswith("/blogs/"):
            blog_id = path.removeprefix("/blogs/")
            if blog_id not in self.blogs:
                return Response(status=404, body={"message": "Blog not found"})
            if method == "GET":
                return Response(status=200, body={"blog": self.blogs[blog_id]})
            if not self._authorized(headers):
                return Response(status=401, body={"message": "No token provided"})
            if method == "PATCH" and not self.patch_supported:
                return Response(status=404, body={"error": "Cannot PATCH"})
            if method in ("PATCH", "PUT"):
                self.blogs[blog_id].update(body)
                return Response(status=200, body={"blog": self.blogs[blog_id]})
            if method == "DELETE":
                del self.blogs[blog_id]
                return Response(status=200, body={"success": True})

        return Response(status=404, body={"message": f"Cannot {method} {path}"})


@pytest.fixture
def config() -> BlogctlConfig:
    return BlogctlConfig.model_validate({"api": {"base_url": BASE}})


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def backend() -> FakeBlogBackend:
    return FakeBlogBackend()


@pytest.fixture
def sessions(config, store, backend) -> SessionManager:
    return SessionManager(ApiClient(config, backend), store)


@pytest.fixture
def synchronizer(config, sessions, backend) -> BlogSynchronizer:
    return BlogSynchronizer(ApiClient(config, backend), sessions)


@pytest.fixture
def scripted(config):
    """Factory: ``client, transport = scripted(outcome, ...)``."""

    def make(*outcomes):
        transport = ScriptedTransport(*outcomes)
        return ApiClient(config, transport), transport

    return make
