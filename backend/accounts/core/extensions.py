"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import redis
from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError
from sqlalchemy import MetaData

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
limiter = Limiter(key_func=get_remote_address)
redis_client: redis.Redis | None = None


def build_redis_client(app: Flask) -> redis.Redis:
    """Create the Redis client described by the application config.

    ``REDIS_CLIENT`` (a ready client, e.g. ``fakeredis.FakeRedis`` in tests)
    takes precedence over ``REDIS_URL``. Commands time out after
    ``REDIS_SOCKET_TIMEOUT`` seconds and are never retried.

    :param app: Configured application.
    :type app: flask.Flask
    :returns: Redis client with ``decode_responses`` enabled.
    :rtype: redis.Redis
    :raises RuntimeError: When neither ``REDIS_CLIENT`` nor ``REDIS_URL`` is set.
    """
    injected = app.config.get("REDIS_CLIENT")
    if injected is not None:
        return injected

    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        raise RuntimeError("REDIS_URL is required: the token blacklist lives in Redis.")

    timeout = float(app.config.get("REDIS_SOCKET_TIMEOUT", 2.0))
    return redis.Redis.from_url(
        redis_url,
        decode_responses=True,
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
        retry_on_timeout=False,
    )


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, rate limiting and Redis.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`accounts.models` package to ensure SQLAlchemy metadata is ready
        for migrations.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from accounts import models as _models  # noqa: F401

    migrate.init_app(app, db)
    limiter.init_app(app)

    global redis_client
    redis_client = build_redis_client(app)
    if app.config.get("REDIS_PING_ON_STARTUP", True):
        try:
            redis_client.ping()
        except RedisError as exc:
            raise RuntimeError(
                f"Failed to connect to Redis at {app.config.get('REDIS_URL')!r}"
            ) from exc
    app.extensions["redis_client"] = redis_client


def get_redis() -> redis.Redis:
    """Return the initialized Redis client."""
    if redis_client is None:
        raise RuntimeError("Redis client is not initialized. Call init_app() first.")
    return redis_client
