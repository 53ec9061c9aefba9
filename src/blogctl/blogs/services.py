"""Blog collection synchronizer.

Keeps an in-memory list of posts that always comes from the server. The
synchronizer never patches its own list after a write: callers re-run
:meth:`BlogSynchronizer.list` once a mutation succeeds, so fields the
server computes (``createdAt``, normalized ``slug``) are always fresh.

Calls are not cancelled. If two ``list()`` calls overlap, whichever
response arrives last replaces the collection, even if it is older.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from blogctl.blogs.models import Blog, BlogDraft, SyncState
from blogctl.client import ApiClient
from blogctl.errors import OperationError, malformed_response
from blogctl.session.services import SessionManager

logger = logging.getLogger(__name__)


class BlogSynchronizer:
    """List, fetch, create, update, delete and publish blog posts."""

    def __init__(self, client: ApiClient, sessions: SessionManager) -> None:
        self.client = client
        self.sessions = sessions
        self.state = SyncState.IDLE
        self.blogs: list[Blog] = []
        self.last_error: OperationError | None = None

    @property
    def _collection_path(self) -> str:
        return self.client.config.blogs.path

    def _item_path(self, blog_id: str) -> str:
        return f"{self._collection_path.rstrip('/')}/{blog_id}"

    def _run(self, operation: str, call: Any) -> Any:
        """Track state around one remote operation.

        On failure the previous collection is kept and only the error of
        this operation is recorded.
        """
        self.state = SyncState.LOADING
        try:
            result = call()
        except OperationError as exc:
            logger.warning("%s failed: %s", operation, exc.message)
            self.state = SyncState.FAILED
            self.last_error = exc
            raise
        self.state = SyncState.READY
        self.last_error = None
        return result

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self) -> list[Blog]:
        """Fetch the full collection and replace the cached one.

        A response without a ``blogs`` list degrades to an empty collection
        instead of failing; entries that do not look like posts are skipped.
        """

        def call() -> list[Blog]:
            data = self.client.request("GET", self._collection_path)
            raw = data.get("blogs") if isinstance(data, dict) else None
            if not isinstance(raw, list):
                logger.warning("Blog list response has no 'blogs' list, showing no posts")
                return []
            blogs = []
            for entry in raw:
                try:
                    blogs.append(Blog.model_validate(entry))
                except ValidationError:
                    logger.warning("Skipping malformed blog entry: %r", entry)
            return blogs

        self.blogs = self._run("list", call)
        logger.info("Fetched %d blogs", len(self.blogs))
        return self.blogs

    def get(self, blog_id: str) -> Blog:
        """Fetch one post for editing."""

        def call() -> Blog:
            data = self.client.request("GET", self._item_path(blog_id))
            raw = data.get("blog") if isinstance(data, dict) else None
            if not isinstance(raw, dict):
                raise malformed_response("missing 'blog' object")
            try:
                return Blog.model_validate(raw)
            except ValidationError as exc:
                raise malformed_response(f"invalid blog: {exc.error_count()} errors") from exc

        return self._run("get", call)

    # ------------------------------------------------------------------
    # Mutations (authenticated)
    # ------------------------------------------------------------------

    def _run_authorized(self, operation: str, send: Callable[[str], Any]) -> Any:
        """Like :meth:`_run`, but fetch the token first.

        A missing session fails inside the tracked call, before any
        request, so ``state`` and ``last_error`` reflect the refusal.
        """
        return self._run(operation, lambda: send(self.sessions.require_token()))

    def create(self, draft: BlogDraft) -> Any:
        logger.info("Creating blog %r", draft.slug)
        return self._run_authorized(
            "create",
            lambda token: self.client.request(
                "POST", self._collection_path, draft.to_payload(), token=token
            ),
        )

    def update(self, blog_id: str, draft: BlogDraft) -> Any:
        logger.info("Updating blog %s", blog_id)
        return self._run_authorized(
            "update",
            lambda token: self.client.request(
                "PUT", self._item_path(blog_id), draft.to_payload(), token=token
            ),
        )

    def delete(self, blog_id: str) -> Any:
        """Delete a post. The caller has already confirmed this."""
        logger.info("Deleting blog %s", blog_id)
        return self._run_authorized(
            "delete",
            lambda token: self.client.request("DELETE", self._item_path(blog_id), token=token),
        )

    def toggle_publish(self, blog_id: str, current_published: bool) -> Any:
        """Flip the published flag with PATCH, falling back to PUT on 404."""
        target = not current_published
        logger.info("Setting published=%s on blog %s", target, blog_id)
        return self._run_authorized(
            "toggle_publish",
            lambda token: self.client.execute_mutation(
                self._item_path(blog_id),
                {"published": target},
                "PATCH",
                "PUT",
                token=token,
            ),
        )
