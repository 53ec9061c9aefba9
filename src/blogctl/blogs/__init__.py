"""Blog post models and the collection synchronizer."""

from blogctl.blogs.models import Blog, BlogDraft, SyncState, parse_tags
from blogctl.blogs.services import BlogSynchronizer

__all__ = ["Blog", "BlogDraft", "BlogSynchronizer", "SyncState", "parse_tags"]
