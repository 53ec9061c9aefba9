"""blogctl - administrative client for a blog content service."""

__version__ = "0.1.0"
