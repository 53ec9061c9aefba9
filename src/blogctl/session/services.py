"""Login, logout and first-run administrator bootstrap."""

from __future__ import annotations

import json
import logging
from typing import Any

from blogctl.client import ApiClient
from blogctl.errors import authentication_rejected, unauthenticated
from blogctl.session.models import AdminStatus, BootstrapResult, Credentials, Session
from blogctl.session.store import ADMIN_KEY, TOKEN_KEY, SessionStore
from blogctl.strategies import probe_endpoints

logger = logging.getLogger(__name__)


class SessionManager:
    """Owns the session token and the logged-in admin record.

    The store is the only copy of the token. Other components ask for it
    through :meth:`require_token` on every call.
    """

    def __init__(self, client: ApiClient, store: SessionStore) -> None:
        self.client = client
        self.store = store

    def current_session(self) -> Session:
        """Read the session from the store.

        A half-written store (token without a readable admin record, or
        the reverse) reads as logged out.
        """
        token = self.store.get(TOKEN_KEY)
        raw_admin = self.store.get(ADMIN_KEY)
        if not token or raw_admin is None:
            return Session()
        try:
            admin = json.loads(raw_admin)
        except json.JSONDecodeError:
            logger.warning("Stored admin record is not valid JSON, ignoring session")
            return Session()
        if not isinstance(admin, dict):
            return Session()
        return Session(token=token, admin=admin)

    def require_token(self) -> str:
        """Return the current token, or raise ``UNAUTHENTICATED``."""
        session = self.current_session()
        if session.token is None:
            raise unauthenticated()
        return session.token

    def _start(self, token: str, admin: dict[str, Any]) -> Session:
        self.store.set(ADMIN_KEY, json.dumps(admin))
        self.store.set(TOKEN_KEY, token)
        return Session(token=token, admin=admin)

    def logout(self) -> None:
        self.store.remove(TOKEN_KEY)
        self.store.remove(ADMIN_KEY)

    def login(self, email: str, password: str) -> Session:
        """Authenticate and store the resulting session.

        Any previous session is cleared first, so a failed login always
        leaves the client logged out.

        Raises:
            OperationError: ``AUTHENTICATION_REJECTED`` when the server
                answers without success or token; the normalized error
                for transport and HTTP failures. The message is passed
                through unmodified (see :func:`~blogctl.errors.suggests_bootstrap`).
        """
        self.logout()
        logger.info("Attempting login for %s", email)

        data = self.client.request(
            "POST",
            self.client.config.auth.login_path,
            {"email": email, "password": password},
        )
        if not isinstance(data, dict):
            raise authentication_rejected()

        token = data.get("token")
        if not data.get("success") or not isinstance(token, str) or not token:
            message = data.get("message")
            raise authentication_rejected(message if isinstance(message, str) else None)

        admin = data.get("admin")
        if not isinstance(admin, dict):
            admin = {"email": email}

        logger.info("Login successful for %s", email)
        return self._start(token, admin)

    def bootstrap_admin(self) -> BootstrapResult:
        """Create the first administrator by probing candidate endpoints.

        The backend's admin-creation route is not known in advance, so each
        configured path is tried in order with the same payload. If the
        winning response carries a token and admin record, the session is
        started as if the operator had logged in.
        """
        cfg = self.client.config
        payload = cfg.bootstrap.payload()

        result = probe_endpoints(
            cfg.auth.bootstrap_paths,
            lambda path: self.client.request("POST", path, payload),
        )
        data = result.value if isinstance(result.value, dict) else {}

        creds = data.get("credentials")
        if isinstance(creds, dict) and creds.get("email") and creds.get("password"):
            credentials = Credentials(email=creds["email"], password=creds["password"])
        else:
            credentials = Credentials(email=payload["email"], password=payload["password"])

        token = data.get("token")
        admin = data.get("admin")
        session_started = False
        if isinstance(token, str) and token and isinstance(admin, dict):
            self._start(token, admin)
            session_started = True

        logger.info("Admin bootstrap succeeded via %s", result.candidate)
        return BootstrapResult(
            endpoint=result.candidate,
            credentials=credentials,
            session_started=session_started,
        )

    def check_admin(self) -> AdminStatus:
        data = self.client.request("GET", self.client.config.auth.check_admin_path)
        if not isinstance(data, dict):
            return AdminStatus()
        admins = data.get("admins")
        admins = [a for a in admins if isinstance(a, dict)] if isinstance(admins, list) else []
        count = data.get("count")
        if isinstance(count, bool) or not isinstance(count, int):
            count = len(admins)
        return AdminStatus(count=count, admins=admins)
