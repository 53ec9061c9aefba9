"""Unified configuration loaded from .blogctl.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".blogctl.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
    Path.home() / ".config" / "blogctl",
]

DEFAULT_BOOTSTRAP_PATHS = [
    "/auth/reset-admin",
    "/auth/create-admin",
    "/admin/create",
    "/auth/register",
]


class ApiConfig(BaseModel):
    """[api] section."""

    base_url: str = "http://localhost:5000/api"
    timeout: float = 30.0


class AuthConfig(BaseModel):
    """[auth] section."""

    login_path: str = "/auth/login"
    check_admin_path: str = "/auth/check-admin"
    bootstrap_paths: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BOOTSTRAP_PATHS)
    )


class BootstrapConfig(BaseModel):
    """[bootstrap] section: the first administrator account."""

    email: str = "admin@finxt.com"
    password: str = "admin123"
    name: str = "Admin"
    role: str = "admin"

    def payload(self) -> dict[str, str]:
        return self.model_dump()


class BlogsConfig(BaseModel):
    """[blogs] section."""

    path: str = "/blogs"


class SessionConfig(BaseModel):
    """[session] section."""

    file: str = "~/.config/blogctl/session.json"

    @property
    def path(self) -> Path:
        return Path(self.file).expanduser()


class BlogctlConfig(BaseModel):
    """Root configuration model."""

    api: ApiConfig = Field(default_factory=ApiConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    bootstrap: BootstrapConfig = Field(default_factory=BootstrapConfig)
    blogs: BlogsConfig = Field(default_factory=BlogsConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)

    def url(self, path: str) -> str:
        """Join a configured path onto the API base URL.

        Absolute URLs are returned unchanged so a single endpoint can
        live on another host.
        """
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.api.base_url.rstrip('/')}/{path.lstrip('/')}"


def load_config(config_path: Path | None = None) -> BlogctlConfig:
    """Load configuration from TOML and environment.

    Args:
        config_path: Explicit TOML file. When omitted, ``.blogctl.toml`` is
            searched for in the working directory and ``~/.config/blogctl``.

    Returns:
        The merged configuration.
    """
    data: dict[str, object] = {}

    if config_path is not None:
        if config_path.exists():
            data = _load_toml(config_path)
            logger.info("Loaded config from %s", config_path)
        else:
            logger.warning("Config file not found: %s", config_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break

    config = BlogctlConfig.model_validate(data) if data else BlogctlConfig()
    return _apply_env_vars(config)


def merge_cli_overrides(config: BlogctlConfig, **cli_kwargs: object) -> BlogctlConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only values that are not None are applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "api_url": ("api", "base_url"),
        "timeout": ("api", "timeout"),
        "session_file": ("session", "file"),
        "admin_email": ("bootstrap", "email"),
        "admin_password": ("bootstrap", "password"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = value

    return BlogctlConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: BlogctlConfig) -> BlogctlConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "BLOGCTL_API_URL": ("api", "base_url"),
        "BLOGCTL_TIMEOUT": ("api", "timeout"),
        "BLOGCTL_SESSION_FILE": ("session", "file"),
        "BLOGCTL_ADMIN_EMAIL": ("bootstrap", "email"),
        "BLOGCTL_ADMIN_PASSWORD": ("bootstrap", "password"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    return BlogctlConfig.model_validate(data)
