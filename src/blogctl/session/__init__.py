"""Session lifecycle: login, logout and administrator bootstrap."""

from blogctl.session.models import AdminStatus, BootstrapResult, Credentials, Session
from blogctl.session.services import SessionManager
from blogctl.session.store import FileSessionStore, MemorySessionStore, SessionStore

__all__ = [
    "AdminStatus",
    "BootstrapResult",
    "Credentials",
    "FileSessionStore",
    "MemorySessionStore",
    "Session",
    "SessionManager",
    "SessionStore",
]
