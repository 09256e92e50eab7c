"""Unit tests for token configuration and service wiring."""

from __future__ import annotations

from datetime import timedelta

import pytest
from flask import Flask

from accounts.core.security import (
    CREDENTIAL_SERVICE_KEY,
    EVENT_PUBLISHER_KEY,
    KV_STORE_KEY,
    SESSION_MANAGER_KEY,
    build_auth_token_config,
)
from accounts.infra.redis.redis_event_publisher import RedisEventPublisher
from accounts.infra.redis.redis_key_value_store import RedisKeyValueStore
from accounts.services.auth.service import CredentialService
from accounts.services.auth.session_manager import SessionManager


def _app(**config) -> Flask:
    app = Flask("accounts-config-test")
    app.config.update(
        JWT_ACCESS_SECRET="a-secret",
        JWT_REFRESH_SECRET="r-secret",
        JWT_ACCESS_TOKEN_EXPIRES_IN="20m",
        JWT_REFRESH_TOKEN_EXPIRES_IN="7d",
    )
    app.config.update(config)
    return app


class TestBuildAuthTokenConfig:
    def test_reads_secrets_and_lifetimes(self):
        cfg = build_auth_token_config(_app(JWT_ACCESS_TOKEN_EXPIRES_IN="15m"))

        assert cfg.access_secret == "a-secret"
        assert cfg.refresh_secret == "r-secret"
        assert cfg.access_expires == timedelta(minutes=15)
        assert cfg.refresh_expires == timedelta(days=7)

    def test_placeholders_rejected_when_configured(self):
        app = _app(JWT_ACCESS_SECRET="CHANGE_ME_ACCESS", REJECT_PLACEHOLDER_SECRETS=True)
        with pytest.raises(RuntimeError):
            build_auth_token_config(app)

    def test_placeholders_only_warn_in_development(self, caplog):
        app = _app(JWT_REFRESH_SECRET="CHANGE_ME_REFRESH")
        build_auth_token_config(app)
        assert "placeholder JWT secrets" in caplog.text

    def test_equal_secrets_warn(self, caplog):
        build_auth_token_config(_app(JWT_REFRESH_SECRET="a-secret"))
        assert "secrets are equal" in caplog.text

    def test_malformed_lifetime(self):
        with pytest.raises(ValueError):
            build_auth_token_config(_app(JWT_ACCESS_TOKEN_EXPIRES_IN="soon"))


def test_app_wires_collaborators(app):
    assert isinstance(app.extensions[SESSION_MANAGER_KEY], SessionManager)
    assert isinstance(app.extensions[CREDENTIAL_SERVICE_KEY], CredentialService)
    assert isinstance(app.extensions[KV_STORE_KEY], RedisKeyValueStore)
    assert isinstance(app.extensions[EVENT_PUBLISHER_KEY], RedisEventPublisher)
    assert app.extensions[CREDENTIAL_SERVICE_KEY].hasher.params.n == 1024
