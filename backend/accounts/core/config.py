"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Placeholder secrets shipped for local development only
PLACEHOLDER_SECRETS: Final[frozenset[str]] = frozenset(
    {"CHANGE_ME", "CHANGE_ME_ACCESS", "CHANGE_ME_REFRESH"}
)

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_DURATION_UNITS: Final[Mapping[str, int]] = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


# Load .env during development (no-op when the file is missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``.

    :raises ValueError: When the variable is set but not an integer.
    """
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val.strip())


def parse_duration(raw: str | int | timedelta) -> timedelta:
    """Convert a lifetime expression such as ``"20m"`` or ``"7d"`` to a timedelta.

    Supported units are ``s``, ``m``, ``h`` and ``d``. A bare integer is read as
    seconds.

    :param raw: Lifetime expression, integer seconds or a ready timedelta.
    :type raw: str | int | timedelta
    :returns: Parsed lifetime.
    :rtype: timedelta
    :raises ValueError: If the expression cannot be parsed.
    """
    if isinstance(raw, timedelta):
        return raw
    if isinstance(raw, int):
        return timedelta(seconds=raw)
    match = _DURATION_RE.match(str(raw))
    if match is None:
        raise ValueError(f"Invalid duration expression: {raw!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _DURATION_UNITS[unit.lower()])


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_ACCESS_SECRET: str
        HMAC secret for access tokens (``JWT_SECRET`` in the environment).
    JWT_REFRESH_SECRET: str
        HMAC secret for refresh tokens. Must differ from the access secret.
    JWT_ACCESS_TOKEN_EXPIRES_IN: str
        Access token lifetime expression (``20m`` by default).
    JWT_REFRESH_TOKEN_EXPIRES_IN: str
        Refresh token lifetime expression (``7d`` by default).
    REDIS_URL: str | None
        Connection URL for the revocation store, cache and event channel.
        Built from ``REDIS_HOST``/``REDIS_PORT`` when unset.
    REDIS_SOCKET_TIMEOUT: float
        Per-command socket timeout in seconds. No automatic retries.
    REDIS_CACHE_TTL: int
        Lifetime in seconds of cached user profiles.
    EVENTS_CHANNEL_PREFIX: str
        Prefix for outbound event channels (also the event ``source``).
    AUTH_LOGIN_RATE_LIMIT: str
        Flask-Limiter expression applied to the login endpoint.
    AUTH_REFRESH_COOKIE_NAME: str
        Name of the HttpOnly cookie carrying the refresh token.
    AUTH_REFRESH_COOKIE_SECURE: bool
        Sets the ``Secure`` flag on the refresh cookie.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_ACCESS_SECRET = os.getenv("JWT_SECRET", "CHANGE_ME_ACCESS")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "CHANGE_ME_REFRESH")
    JWT_ACCESS_TOKEN_EXPIRES_IN = os.getenv("JWT_ACCESS_TOKEN_EXPIRES_IN", "20m")
    JWT_REFRESH_TOKEN_EXPIRES_IN = os.getenv("JWT_REFRESH_TOKEN_EXPIRES_IN", "7d")

    # Auth HTTP surface
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    AUTH_REFRESH_COOKIE_NAME = os.getenv("AUTH_REFRESH_COOKIE_NAME", "refreshToken")
    AUTH_REFRESH_COOKIE_SECURE = env_bool("AUTH_REFRESH_COOKIE_SECURE", False)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

    # Redis
    REDIS_URL = os.getenv(
        "REDIS_URL",
        f"redis://{os.getenv('REDIS_HOST', 'localhost')}:{os.getenv('REDIS_PORT', '6379')}/0",
    )
    REDIS_SOCKET_TIMEOUT = float(os.getenv("REDIS_SOCKET_TIMEOUT", "2.0"))
    REDIS_CACHE_TTL = env_int("REDIS_CACHE_TTL", 3600)
    REDIS_PING_ON_STARTUP = env_bool("REDIS_PING_ON_STARTUP", True)
    EVENTS_CHANNEL_PREFIX = os.getenv("EVENTS_CHANNEL_PREFIX", "user-service")

    # Password hashing (scrypt cost; lower only in tests)
    PASSWORD_SCRYPT_N = env_int("PASSWORD_SCRYPT_N", 16384)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Disables rate limiting and the Redis startup ping.
    - Lowers the scrypt cost so hashing stays fast.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    PROPAGATE_EXCEPTIONS = True
    RATELIMIT_ENABLED = False
    REDIS_PING_ON_STARTUP = False
    PASSWORD_SCRYPT_N = 1024


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled and marks the refresh cookie as
    ``Secure``. Placeholder secrets are rejected at startup by
    :func:`accounts.core.security.init_app`.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    AUTH_REFRESH_COOKIE_SECURE = env_bool("AUTH_REFRESH_COOKIE_SECURE", True)
    REJECT_PLACEHOLDER_SECRETS = True


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
