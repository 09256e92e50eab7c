"""Wire the authentication and profile collaborators into the Flask app.

Everything built here is immutable or stateless and shared by all requests of
a worker. Request-scoped services (those carrying a
:class:`~accounts.services._shared.base.ServiceContext`) are assembled per
request in :mod:`accounts.api.deps`.
"""

from __future__ import annotations

import logging

from flask import Flask

from accounts.core.config import PLACEHOLDER_SECRETS, parse_duration
from accounts.core.extensions import get_redis
from accounts.infra.db.sqlalchemy_credential_store import SQLAlchemyCredentialStore
from accounts.infra.jwt.pyjwt_token_codec import PyJWTTokenCodec
from accounts.infra.redis.redis_event_publisher import RedisEventPublisher
from accounts.infra.redis.redis_key_value_store import RedisKeyValueStore
from accounts.services.auth.dto import AuthTokenConfig
from accounts.services.auth.password_hasher import PasswordHasher, ScryptParams
from accounts.services.auth.service import CredentialService
from accounts.services.auth.session_manager import SessionManager

log = logging.getLogger(__name__)

# app.extensions keys
AUTH_CONFIG_KEY = "auth_token_config"
SESSION_MANAGER_KEY = "session_manager"
CREDENTIAL_SERVICE_KEY = "credential_service"
KV_STORE_KEY = "kv_store"
EVENT_PUBLISHER_KEY = "event_publisher"


def build_auth_token_config(app: Flask) -> AuthTokenConfig:
    """Read secrets and lifetimes from ``app.config``.

    :raises RuntimeError: When placeholder secrets are used where
        ``REJECT_PLACEHOLDER_SECRETS`` is set.
    :raises ValueError: When a lifetime expression is malformed.
    """
    cfg = AuthTokenConfig(
        access_secret=str(app.config["JWT_ACCESS_SECRET"]),
        refresh_secret=str(app.config["JWT_REFRESH_SECRET"]),
        access_expires=parse_duration(app.config["JWT_ACCESS_TOKEN_EXPIRES_IN"]),
        refresh_expires=parse_duration(app.config["JWT_REFRESH_TOKEN_EXPIRES_IN"]),
    )

    placeholders = {cfg.access_secret, cfg.refresh_secret} & PLACEHOLDER_SECRETS
    if placeholders and app.config.get("REJECT_PLACEHOLDER_SECRETS", False):
        raise RuntimeError("JWT_SECRET and JWT_REFRESH_SECRET must be set in production.")
    if placeholders:
        log.warning("using placeholder JWT secrets; do not deploy this configuration")
    if cfg.access_secret == cfg.refresh_secret:
        log.warning("access and refresh secrets are equal; token kinds are interchangeable")
    return cfg


def init_app(app: Flask) -> None:
    """Build the token, credential and profile collaborators once.

    Must run after :func:`accounts.core.extensions.init_app` (needs Redis).
    """
    cfg = build_auth_token_config(app)
    hasher = PasswordHasher(ScryptParams(n=int(app.config.get("PASSWORD_SCRYPT_N", 16384))))

    r = get_redis()
    store = RedisKeyValueStore(r)
    sessions = SessionManager(codec=PyJWTTokenCodec(), store=store, cfg=cfg)
    credentials = CredentialService(
        hasher=hasher,
        sessions=sessions,
        credentials=SQLAlchemyCredentialStore(),
    )

    app.extensions[AUTH_CONFIG_KEY] = cfg
    app.extensions[SESSION_MANAGER_KEY] = sessions
    app.extensions[CREDENTIAL_SERVICE_KEY] = credentials
    app.extensions[KV_STORE_KEY] = store
    app.extensions[EVENT_PUBLISHER_KEY] = RedisEventPublisher(
        r, source=app.config.get("EVENTS_CHANNEL_PREFIX", "user-service")
    )
