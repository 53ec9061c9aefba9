"""Pure data models for blog posts.

No I/O here. Services import from this module.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)


class SyncState(StrEnum):
    """Where the synchronizer is in its last operation."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


def parse_tags(raw: str) -> list[str]:
    """Split a comma-separated tag string.

    Entries are trimmed, empty ones dropped and order kept:
    ``"a, b ,,c"`` → ``["a", "b", "c"]``.
    """
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


class Blog(BaseModel):
    """A blog post as the server reports it."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    title: str = ""
    slug: str = ""
    content: str = ""
    thumbnail: str | None = None
    tags: list[str] = Field(default_factory=list)
    published: bool = False
    created_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("createdAt", "created_at")
    )

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) and not isinstance(value, bool) else value

    @field_validator("title", "slug", "content", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("thumbnail", mode="before")
    @classmethod
    def _blank_thumbnail(cls, value: Any) -> Any:
        return value or None

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return parse_tags(value)
        if isinstance(value, list):
            return [str(tag) for tag in value if tag is not None]
        return []

    @field_validator("created_at", mode="wrap")
    @classmethod
    def _lenient_created_at(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        # Unreadable timestamps read as None.
        try:
            return handler(value)
        except ValidationError:
            return None

    @property
    def tags_display(self) -> str:
        return ", ".join(self.tags) if self.tags else "No tags"

    @property
    def status_label(self) -> str:
        return "Published" if self.published else "Draft"


class BlogDraft(BaseModel):
    """Operator input for creating or editing a post.

    ``content`` and ``thumbnail`` are opaque strings from the editor and
    file inputs; ``tags`` is the raw comma-separated field.
    """

    title: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    content: str = ""
    thumbnail: str = ""
    tags: str = ""

    @classmethod
    def from_blog(cls, blog: Blog) -> BlogDraft:
        """Pre-fill a draft from an existing post, as the edit form does.

        The result is not validated; a post stored with an empty title
        still loads, and validation happens once the edited fields are
        submitted.
        """
        return cls.model_construct(
            title=blog.title,
            slug=blog.slug,
            content=blog.content,
            thumbnail=blog.thumbnail or "",
            tags=", ".join(blog.tags),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "slug": self.slug,
            "content": self.content,
            "thumbnail": self.thumbnail,
            "tags": parse_tags(self.tags),
        }
