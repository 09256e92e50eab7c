"""Integration tests for authentication endpoints."""

from __future__ import annotations

from redis.exceptions import ConnectionError as RedisConnectionError

from tests.factories.user import DEFAULT_PASSWORD, AdminFactory, UserFactory
from tests.helpers.http import (
    API,
    REFRESH_COOKIE,
    access_token_for,
    bearer,
    json_headers,
    login,
    refresh_cookie,
)

REGISTER = {
    "name": "Alice",
    "email": "alice@example.com",
    "password": "password123",
    "address": "Main St 1",
}


def _register(client, **overrides):
    return client.post(
        f"{API}/auth/register", json={**REGISTER, **overrides}, headers=json_headers()
    )


class TestRegister:
    def test_register_returns_public_user(self, client, faker) -> None:
        address = faker.street_address()

        resp = _register(client, address=address)

        assert resp.status_code == 201
        body = resp.get_json()["data"]
        assert body["message"] == "User registered successfully"
        assert body["user"]["email"] == "alice@example.com"
        assert body["user"]["role"] == "user"
        assert body["user"]["address"] == address
        assert "password" not in resp.get_data(as_text=True)
        assert "access_token" not in body
        assert resp.headers.get("ETag")

    def test_duplicate_email_is_conflict(self, client) -> None:
        _register(client)
        resp = _register(client, email="ALICE@example.com")

        assert resp.status_code == 409
        assert resp.mimetype == "application/problem+json"
        assert resp.get_json()["detail"] == "Email already registered"

    def test_short_password_is_rejected(self, client) -> None:
        resp = _register(client, password="short")

        assert resp.status_code == 422
        assert "password" in resp.get_json()["details"]["errors"]

    def test_missing_fields_are_rejected(self, client) -> None:
        resp = client.post(f"{API}/auth/register", json={}, headers=json_headers())

        assert resp.status_code == 422
        errors = resp.get_json()["details"]["errors"]
        assert {"name", "email", "password"} <= set(errors)


class TestLogin:
    def test_login_returns_access_token_and_cookie(self, client, session_manager) -> None:
        user = UserFactory()

        resp = login(client, user.email, DEFAULT_PASSWORD)

        assert resp.status_code == 200
        body = resp.get_json()["data"]
        assert body["token_type"] == "bearer"
        assert body["user"]["id"] == user.id
        assert "refresh_token" not in body
        assert session_manager.verify_access_token(body["access_token"]).sub == user.id

        cookie = next(
            h for h in resp.headers.getlist("Set-Cookie") if h.startswith(f"{REFRESH_COOKIE}=")
        )
        assert "HttpOnly" in cookie
        assert "SameSite=Strict" in cookie
        assert "Path=/api/v1/auth" in cookie
        assert "Max-Age=604800" in cookie

    def test_bad_credentials_look_alike(self, client) -> None:
        user = UserFactory()

        wrong_password = login(client, user.email, "not-the-password")
        unknown_email = login(client, "nobody@example.com", DEFAULT_PASSWORD)

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.get_json()["detail"] == "Invalid credentials"
        assert unknown_email.get_json()["detail"] == "Invalid credentials"
        assert wrong_password.headers["WWW-Authenticate"] == "Bearer"

    def test_role_travels_in_token(self, client, session_manager) -> None:
        admin = AdminFactory()
        token = access_token_for(client, admin.email, DEFAULT_PASSWORD)
        assert session_manager.verify_access_token(token).role == "admin"


class TestRefresh:
    def test_refresh_from_cookie(self, client, session_manager) -> None:
        user = UserFactory()
        login(client, user.email, DEFAULT_PASSWORD)

        resp = client.post(f"{API}/auth/refresh", headers=json_headers())

        assert resp.status_code == 200
        token = resp.get_json()["data"]["access_token"]
        assert session_manager.verify_access_token(token).sub == user.id

    def test_refresh_from_body(self, client, session_manager) -> None:
        user = UserFactory()
        token = refresh_cookie(login(client, user.email, DEFAULT_PASSWORD))
        client.delete_cookie(REFRESH_COOKIE, path="/api/v1/auth")

        resp = client.post(
            f"{API}/auth/refresh", json={"refreshToken": token}, headers=json_headers()
        )

        assert resp.status_code == 200

    def test_refresh_without_token(self, client) -> None:
        resp = client.post(f"{API}/auth/refresh", headers=json_headers())

        assert resp.status_code == 401
        assert resp.get_json()["detail"] == "Invalid or expired token"

    def test_access_token_cannot_refresh(self, client) -> None:
        user = UserFactory()
        access = access_token_for(client, user.email, DEFAULT_PASSWORD)
        client.delete_cookie(REFRESH_COOKIE, path="/api/v1/auth")

        resp = client.post(
            f"{API}/auth/refresh", json={"refreshToken": access}, headers=json_headers()
        )

        assert resp.status_code == 401


class TestLogout:
    def test_logout_revokes_tokens_and_clears_cookie(self, client) -> None:
        user = UserFactory()
        access = access_token_for(client, user.email, DEFAULT_PASSWORD)

        resp = client.post(f"{API}/auth/logout", headers=bearer(access))

        assert resp.status_code == 200
        assert resp.get_json()["data"]["message"] == "Logged out successfully"
        assert refresh_cookie(resp) is None
        assert client.get(f"{API}/auth/me", headers=bearer(access)).status_code == 401
        assert client.post(f"{API}/auth/refresh", headers=json_headers()).status_code == 401

    def test_logout_without_tokens_succeeds(self, client) -> None:
        resp = client.post(f"{API}/auth/logout", headers=json_headers())
        assert resp.status_code == 200

    def test_logout_with_garbage_succeeds(self, client) -> None:
        resp = client.post(
            f"{API}/auth/logout",
            json={"refreshToken": "garbage"},
            headers=bearer("also-garbage"),
        )
        assert resp.status_code == 200

    def test_blacklist_entry_written(self, client, session_manager, fake_redis) -> None:
        user = UserFactory()
        access = access_token_for(client, user.email, DEFAULT_PASSWORD)
        jti = session_manager.verify_access_token(access).jti

        client.post(f"{API}/auth/logout", headers=bearer(access))

        assert fake_redis.exists(f"token:blacklist:{jti}") == 1
        assert 0 < fake_redis.ttl(f"token:blacklist:{jti}") <= 7 * 24 * 3600


class TestMe:
    def test_me_returns_profile(self, client) -> None:
        user = UserFactory(name="Judy")
        access = access_token_for(client, user.email, DEFAULT_PASSWORD)

        resp = client.get(f"{API}/auth/me", headers=bearer(access))

        assert resp.status_code == 200
        assert resp.get_json()["data"]["name"] == "Judy"
        assert resp.headers.get("ETag")

    def test_me_requires_bearer(self, client) -> None:
        missing = client.get(f"{API}/auth/me")
        malformed = client.get(f"{API}/auth/me", headers={"Authorization": "Token abc"})
        invalid = client.get(f"{API}/auth/me", headers=bearer("abc"))

        assert missing.status_code == malformed.status_code == invalid.status_code == 401
        assert missing.get_json()["detail"] == invalid.get_json()["detail"]

    def test_revocation_store_outage_denies(self, client, kv_store, monkeypatch) -> None:
        user = UserFactory()
        access = access_token_for(client, user.email, DEFAULT_PASSWORD)

        def _down(*args, **kwargs):
            raise RedisConnectionError("down")

        monkeypatch.setattr(kv_store.r, "exists", _down)

        resp = client.get(f"{API}/auth/me", headers=bearer(access))
        assert resp.status_code == 401
