"""Unit tests for :class:`CredentialService` against in-memory collaborators."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import jwt
import pytest
from redis.exceptions import ReadOnlyError

from accounts.infra.jwt.pyjwt_token_codec import PyJWTTokenCodec
from accounts.infra.redis.redis_key_value_store import RedisKeyValueStore
from accounts.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
)
from accounts.services._shared.ports import (
    InMemoryCredentialStore,
    InMemoryKeyValueStore,
    UnavailableKeyValueStore,
)
from accounts.services.auth.dto import (
    AuthenticatedIdentity,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
)
from accounts.services.auth.service import CredentialService
from accounts.services.auth.session_manager import SessionManager, blacklist_key
from tests.helpers.utils import not_raises


@pytest.fixture()
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def credentials() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture()
def sessions(store, auth_cfg) -> SessionManager:
    return SessionManager(codec=PyJWTTokenCodec(), store=store, cfg=auth_cfg)


@pytest.fixture()
def service(hasher, sessions, credentials) -> CredentialService:
    return CredentialService(hasher=hasher, sessions=sessions, credentials=credentials)


def _register(service, email="alice@example.com", password="password123", **extra):
    return service.register(RegisterIn(name="Alice", email=email, password=password, **extra))


class TestRegister:
    def test_creates_user_with_default_role(self, service, credentials):
        out = _register(service, address="Main St 1")

        assert out.message == "User registered successfully"
        assert out.user.role == "user"
        assert out.user.address == "Main St 1"
        record = credentials.find_credential_by_id(out.user.id)
        assert record is not None
        assert record.password_hash != "password123"

    def test_public_output_has_no_password_hash(self, service):
        out = _register(service)
        assert not hasattr(out.user, "password_hash")

    def test_email_is_normalized(self, service):
        out = _register(service, email="  Alice@Example.COM ")
        assert out.user.email == "alice@example.com"

    def test_duplicate_email_conflicts(self, service):
        _register(service)
        with pytest.raises(ConflictError) as info:
            _register(service, email="ALICE@example.com")
        assert str(info.value) == "Email already registered"


class TestLogin:
    def test_issues_pair_and_user(self, service, sessions):
        _register(service)

        out = service.login(LoginIn(email="alice@example.com", password="password123"))

        access = sessions.verify_access_token(out.access_token)
        refresh = sessions.verify_refresh_token(out.refresh_token)
        assert access.sub == out.user.id
        assert access.role == "user"
        assert access.jti == refresh.jti

    def test_email_lookup_is_case_insensitive(self, service):
        _register(service)
        with not_raises(AuthenticationError):
            service.login(LoginIn(email="ALICE@example.com", password="password123"))

    def test_unknown_email_and_wrong_password_look_alike(self, service):
        _register(service)

        with pytest.raises(AuthenticationError) as unknown:
            service.login(LoginIn(email="bob@example.com", password="password123"))
        with pytest.raises(AuthenticationError) as mismatch:
            service.login(LoginIn(email="alice@example.com", password="wrong-password"))

        assert str(unknown.value) == str(mismatch.value) == "Invalid credentials"

    def test_role_claim_follows_stored_role(self, service, credentials, sessions):
        out = _register(service)
        credentials.set_role(out.user.id, "admin")

        login = service.login(LoginIn(email="alice@example.com", password="password123"))

        assert sessions.verify_access_token(login.access_token).role == "admin"


class TestRefresh:
    def test_returns_new_access_token(self, service, sessions):
        _register(service)
        login = service.login(LoginIn(email="alice@example.com", password="password123"))

        access = service.refresh(RefreshIn(refresh_token=login.refresh_token))

        claims = sessions.verify_access_token(access)
        assert claims.sub == login.user.id
        assert claims.jti != sessions.verify_access_token(login.access_token).jti

    def test_rejects_access_token(self, service):
        _register(service)
        login = service.login(LoginIn(email="alice@example.com", password="password123"))
        with pytest.raises(AuthenticationError):
            service.refresh(RefreshIn(refresh_token=login.access_token))

    def test_rejects_token_of_deleted_user(self, service, credentials):
        _register(service)
        login = service.login(LoginIn(email="alice@example.com", password="password123"))
        credentials.remove(login.user.id)

        with pytest.raises(AuthenticationError):
            service.refresh(RefreshIn(refresh_token=login.refresh_token))

    def test_checks_revocation_once(self, service, store):
        _register(service)
        login = service.login(LoginIn(email="alice@example.com", password="password123"))

        with patch.object(store, "exists", wraps=store.exists) as exists:
            service.refresh(RefreshIn(refresh_token=login.refresh_token))

        exists.assert_called_once()


class TestLogout:
    def test_revokes_both_tokens(self, service, sessions):
        _register(service)
        login = service.login(LoginIn(email="alice@example.com", password="password123"))

        service.logout(
            LogoutIn(access_token=login.access_token, refresh_token=login.refresh_token)
        )

        with pytest.raises(AuthenticationError):
            sessions.verify_access_token(login.access_token)
        with pytest.raises(AuthenticationError):
            service.refresh(RefreshIn(refresh_token=login.refresh_token))

    def test_refresh_only_still_revokes_access(self, service, sessions):
        _register(service)
        login = service.login(LoginIn(email="alice@example.com", password="password123"))

        service.logout(LogoutIn(refresh_token=login.refresh_token))

        # Same jti on both halves
        with pytest.raises(AuthenticationError):
            sessions.verify_access_token(login.access_token)

    def test_blacklist_entry_lives_until_token_expiry(self, service, sessions, store):
        _register(service)
        login = service.login(LoginIn(email="alice@example.com", password="password123"))
        claims = sessions.verify_refresh_token(login.refresh_token)

        service.logout(LogoutIn(refresh_token=login.refresh_token))

        remaining = claims.exp - datetime.now(UTC).timestamp()
        assert store.ttl(blacklist_key(claims.jti)) == pytest.approx(remaining, abs=5)

    def test_tokens_without_exp_use_fallback_window(self, service, sessions, store, auth_cfg):
        token = jwt.encode({"sub": "u1", "jti": "no-exp"}, auth_cfg.access_secret, "HS256")

        service.logout(LogoutIn(access_token=token))

        assert store.ttl(blacklist_key("no-exp")) == pytest.approx(20 * 60, abs=5)

    @pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c"])
    def test_garbage_never_raises(self, service, garbage):
        with not_raises(Exception):
            service.logout(LogoutIn(access_token=garbage, refresh_token=garbage))

    def test_no_tokens_is_a_no_op(self, service, store):
        service.logout(LogoutIn())
        assert store._data == {}

    def test_store_outage_is_swallowed(self, hasher, auth_cfg, credentials):
        issuing = SessionManager(
            codec=PyJWTTokenCodec(), store=InMemoryKeyValueStore(), cfg=auth_cfg
        )
        pair = issuing.generate_tokens("u1", "a@example.com")
        broken = UnavailableKeyValueStore()
        service = CredentialService(
            hasher=hasher,
            sessions=SessionManager(codec=PyJWTTokenCodec(), store=broken, cfg=auth_cfg),
            credentials=credentials,
        )

        with not_raises(Exception):
            service.logout(LogoutIn(access_token=pair.access_token))
        assert broken.calls == ["set"]

    def test_read_only_replica_is_swallowed(self, hasher, auth_cfg, credentials):
        pair = SessionManager(
            codec=PyJWTTokenCodec(), store=InMemoryKeyValueStore(), cfg=auth_cfg
        ).generate_tokens("u1", "a@example.com")
        client = MagicMock()
        client.set.side_effect = ReadOnlyError("You can't write against a read only replica.")
        service = CredentialService(
            hasher=hasher,
            sessions=SessionManager(
                codec=PyJWTTokenCodec(), store=RedisKeyValueStore(client), cfg=auth_cfg
            ),
            credentials=credentials,
        )

        with not_raises(Exception):
            service.logout(
                LogoutIn(access_token=pair.access_token, refresh_token=pair.refresh_token)
            )
        assert client.set.call_count == 2


class TestWhoami:
    def test_returns_public_fields(self, service):
        out = _register(service)
        identity = AuthenticatedIdentity(user_id=out.user.id, email=out.user.email, role="user")

        me = service.whoami(identity)

        assert me.id == out.user.id
        assert me.name == "Alice"

    def test_missing_account_is_not_found(self, service):
        identity = AuthenticatedIdentity(user_id="ghost", email="g@example.com", role="user")
        with pytest.raises(NotFoundError):
            service.whoami(identity)


class TestEndToEnd:
    def test_register_then_login_scenario(self, service):
        service.register(RegisterIn(name="Alice", email="alice@x.com", password="password1234"))

        out = service.login(LoginIn(email="alice@x.com", password="password1234"))
        assert out.access_token != out.refresh_token

        with pytest.raises(AuthenticationError) as wrong:
            service.login(LoginIn(email="alice@x.com", password="password9999"))
        with pytest.raises(AuthenticationError) as unknown:
            service.login(LoginIn(email="bob@x.com", password="password1234"))
        assert type(wrong.value) is type(unknown.value)
        assert str(wrong.value) == str(unknown.value)

    def test_register_login_refresh_logout(self, service, sessions):
        _register(service)
        login = service.login(LoginIn(email="alice@example.com", password="password123"))
        access = service.refresh(RefreshIn(refresh_token=login.refresh_token))
        assert sessions.verify_access_token(access).sub == login.user.id

        service.logout(
            LogoutIn(access_token=login.access_token, refresh_token=login.refresh_token)
        )

        with pytest.raises(AuthenticationError):
            sessions.verify_access_token(login.access_token)
        with pytest.raises(AuthenticationError):
            service.refresh(RefreshIn(refresh_token=login.refresh_token))

    def test_fresh_access_token_survives_logout_of_old_pair(self, service, sessions):
        _register(service)
        login = service.login(LoginIn(email="alice@example.com", password="password123"))
        renewed = service.refresh(RefreshIn(refresh_token=login.refresh_token))

        service.logout(LogoutIn(access_token=login.access_token))

        # Renewed access tokens carry their own jti
        with not_raises(AuthenticationError):
            sessions.verify_access_token(renewed)
