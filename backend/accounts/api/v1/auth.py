"""Authentication endpoints: register, login, refresh, logout, me."""

from __future__ import annotations

from flask import Blueprint, Response, current_app, request

from accounts.api.deps import (
    bearer_token,
    get_credential_service,
    json_body,
    json_response,
    require_auth,
    timing,
)
from accounts.api.etag import set_response_etag
from accounts.core.extensions import limiter
from accounts.core.security import AUTH_CONFIG_KEY
from accounts.schemas import (
    LoginResponseSchema,
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterResponseSchema,
    RegisterSchema,
    TokenResponseSchema,
    UserSchema,
)
from accounts.services._shared.errors import AuthenticationError
from accounts.services.auth.dto import (
    AuthenticatedIdentity,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
)

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
register_response_schema = RegisterResponseSchema()
login_schema = LoginSchema()
login_response_schema = LoginResponseSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
token_schema = TokenResponseSchema()
user_schema = UserSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


# ------------------------------ Cookie helpers ------------------------------


def _cookie_name() -> str:
    return str(current_app.config.get("AUTH_REFRESH_COOKIE_NAME", "refreshToken"))


def _cookie_path() -> str:
    # Scoped to the auth routes so both refresh and logout receive it
    return f"{current_app.config.get('API_BASE_PREFIX', '/api')}/v1/auth"


def _set_refresh_cookie(response: Response, token: str) -> None:
    lifetime = current_app.extensions[AUTH_CONFIG_KEY].refresh_expires
    response.set_cookie(
        _cookie_name(),
        token,
        max_age=int(lifetime.total_seconds()),
        httponly=True,
        secure=bool(current_app.config.get("AUTH_REFRESH_COOKIE_SECURE", False)),
        samesite="Strict",
        path=_cookie_path(),
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(_cookie_name(), path=_cookie_path())


def _refresh_token_from_request(body_token: str | None) -> str | None:
    return body_token or request.cookies.get(_cookie_name())


# --------------------------------- Routes -----------------------------------


@bp.post("/register")
@timing
def register():
    """Create an account with the default role; tokens are not issued."""
    data = register_schema.load(json_body())
    result = get_credential_service().register(
        RegisterIn(
            name=data["name"],
            email=data["email"],
            password=data["password"],
            address=data.get("address"),
        )
    )
    body = {"data": register_response_schema.dump(result)}
    response = json_response(body, status=201)
    set_response_etag(response, result.user)
    return response


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Verify credentials; the refresh token travels only in the cookie."""
    data = login_schema.load(json_body())
    result = get_credential_service().login(LoginIn(email=data["email"], password=data["password"]))
    body = {"data": login_response_schema.dump(result)}
    response = json_response(body)
    _set_refresh_cookie(response, result.refresh_token)
    return response


@bp.post("/refresh")
@timing
def refresh():
    """Issue a new access token from the refresh cookie (or body)."""
    data = refresh_schema.load(json_body())
    token = _refresh_token_from_request(data.get("refresh_token"))
    if not token:
        raise AuthenticationError()
    access_token = get_credential_service().refresh(RefreshIn(refresh_token=token))
    return json_response({"data": token_schema.dump({"access_token": access_token})})


@bp.post("/logout")
@timing
def logout():
    """Revoke whatever tokens the client presents. Always succeeds."""
    data = logout_schema.load(json_body())
    get_credential_service().logout(
        LogoutIn(
            access_token=bearer_token(),
            refresh_token=_refresh_token_from_request(data.get("refresh_token")),
        )
    )
    response = json_response({"data": {"message": "Logged out successfully"}})
    _clear_refresh_cookie(response)
    return response


@bp.get("/me")
@require_auth
@timing
def me(identity: AuthenticatedIdentity):
    """Return the public fields of the authenticated user."""
    user = get_credential_service().whoami(identity)
    response = json_response({"data": user_schema.dump(user)})
    set_response_etag(response, user)
    return response
