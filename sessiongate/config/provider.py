"""Configuration provider following Black Box Design principles."""
import os
import re
from dataclasses import dataclass, field
from typing import Optional, Protocol

from sessiongate.modules.filters import (
    PathFilter,
    default_disable,
    default_enable,
    parse_path_filter,
)

_COOKIE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_\-]+$")
_SAMESITE_VALUES = ("lax", "strict", "none")

# Browsers cap cookie lifetimes at 400 days
MAX_COOKIE_EXPIRES = 400 * 86400


@dataclass
class SessionConfig:
    """Session middleware configuration."""
    database: str = "redis://localhost:6379/0"
    session_expires: int = 86400
    cookie_expires: int = 0
    cookie_name: str = "session"
    enable: PathFilter = field(default_factory=default_enable)
    disable: PathFilter = field(default_factory=default_disable)
    cookie_httponly: bool = True
    cookie_secure: bool = False
    cookie_samesite: Optional[str] = "lax"

    def __post_init__(self):
        if self.session_expires <= 0:
            raise ValueError("session_expires must be a positive number of seconds")
        if self.cookie_expires < 0:
            raise ValueError("cookie_expires must not be negative")
        if self.cookie_expires > MAX_COOKIE_EXPIRES:
            raise ValueError(f"cookie_expires must not exceed {MAX_COOKIE_EXPIRES} seconds")
        if not _COOKIE_NAME_PATTERN.match(self.cookie_name):
            raise ValueError(f"Invalid cookie name: {self.cookie_name!r}")
        if self.cookie_samesite is not None and self.cookie_samesite not in _SAMESITE_VALUES:
            raise ValueError(f"Invalid SameSite value: {self.cookie_samesite!r}")


@dataclass
class ServerConfig:
    """API server configuration."""
    host: str
    port: int
    log_level: str


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_session_config(self) -> SessionConfig:
        """Get session configuration."""
        ...

    def get_server_config(self) -> ServerConfig:
        """Get API server configuration."""
        ...


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_session_config(self) -> SessionConfig:
        """Get session configuration from environment variables."""
        enable = os.getenv("SESSION_ENABLE")
        disable = os.getenv("SESSION_DISABLE")
        samesite = os.getenv("SESSION_COOKIE_SAMESITE", "lax").lower()

        return SessionConfig(
            database=os.getenv("SESSION_DATABASE")
            or os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            session_expires=int(os.getenv("SESSION_EXPIRES", "86400")),
            cookie_expires=int(os.getenv("SESSION_COOKIE_EXPIRES", "0")),
            cookie_name=os.getenv("SESSION_COOKIE_NAME", "session"),
            enable=parse_path_filter(enable) if enable else default_enable(),
            disable=parse_path_filter(disable) if disable else default_disable(),
            cookie_httponly=_env_bool("SESSION_COOKIE_HTTPONLY", "true"),
            cookie_secure=_env_bool("SESSION_COOKIE_SECURE", "false"),
            cookie_samesite=None if samesite in ("", "unset") else samesite,
        )

    def get_server_config(self) -> ServerConfig:
        """Get API server configuration from environment variables."""
        return ServerConfig(
            host=os.getenv("API_HOST", "0.0.0.0"),
            port=int(os.getenv("API_PORT", "8080")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
