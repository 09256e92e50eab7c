# accounts/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from accounts.models.user import DEFAULT_ROLE, ROLES
from accounts.services._shared.ports.credential_store import CredentialRecord

__all__ = [
    "DEFAULT_ROLE",
    "ROLES",
    "RegisterIn",
    "LoginIn",
    "RefreshIn",
    "LogoutIn",
    "TokenPairOut",
    "UserPublicOut",
    "RegisterOut",
    "LoginOut",
    "TokenClaims",
    "AuthenticatedIdentity",
    "AuthTokenConfig",
]

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param name: Display name.
    :type name: str
    :param email: User email (normalized by the service).
    :type email: str
    :param password: Raw password (min. 8 characters, validated at the edge).
    :type password: str
    :param address: Optional postal address.
    :type address: str | None
    """

    name: str
    email: str
    password: str
    address: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout. Both tokens are optional.

    :param access_token: Encoded access JWT from the ``Authorization`` header.
    :type access_token: str | None
    :param refresh_token: Encoded refresh JWT from the cookie or body.
    :type refresh_token: str | None
    """

    access_token: str | None = None
    refresh_token: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public-safe user representation (never carries the password hash).

    :param id: User identifier.
    :param email: Email address.
    :param name: Display name.
    :param role: Assigned role.
    :param address: Optional postal address.
    :param profile_picture_url: Optional avatar URL.
    :param created_at: Creation timestamp.
    :param updated_at: Last update timestamp.
    """

    id: str
    email: str
    name: str
    role: str
    address: str | None = None
    profile_picture_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: CredentialRecord) -> UserPublicOut:
        return cls(
            id=record.id,
            email=record.email,
            name=record.name,
            role=record.role,
            address=record.address,
            profile_picture_url=record.profile_picture_url,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


@dataclass(frozen=True, slots=True)
class RegisterOut:
    """
    Result of a successful registration.

    :param user: Created user (public fields).
    :param message: Human-readable confirmation.
    """

    user: UserPublicOut
    message: str = "User registered successfully"


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    Result of a successful login.

    :param access_token: Encoded access JWT.
    :param refresh_token: Encoded refresh JWT.
    :param user: Authenticated user (public fields).
    """

    access_token: str
    refresh_token: str
    user: UserPublicOut


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified claims of an access or refresh token.

    :param sub: Subject (user id).
    :param email: Email at issuance time.
    :param role: Role at issuance time, when present.
    :param jti: Token identifier, when present.
    :param iat: Issued-at (epoch seconds).
    :param exp: Expiry (epoch seconds).
    """

    sub: str
    email: str
    role: str | None = None
    jti: str | None = None
    iat: int | None = None
    exp: int | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> TokenClaims:
        exp = payload.get("exp")
        iat = payload.get("iat")
        return cls(
            sub=str(payload["sub"]),
            email=str(payload.get("email", "")),
            role=payload.get("role"),
            jti=payload.get("jti"),
            iat=int(iat) if iat is not None else None,
            exp=int(exp) if exp is not None else None,
        )


@dataclass(frozen=True, slots=True)
class AuthenticatedIdentity:
    """
    Identity resolved from a verified access token, handed to views explicitly.

    :param user_id: Token subject.
    :param email: Email claim.
    :param role: Role claim (``None`` when the token carried none).
    :param jti: Token identifier.
    """

    user_id: str
    email: str
    role: str | None = None
    jti: str | None = None

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> AuthenticatedIdentity:
        return cls(user_id=claims.sub, email=claims.email, role=claims.role, jti=claims.jti)


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration, built once at startup.

    :param access_secret: HMAC secret for access tokens.
    :type access_secret: str
    :param refresh_secret: HMAC secret for refresh tokens.
    :type refresh_secret: str
    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    """

    access_secret: str
    refresh_secret: str
    access_expires: timedelta = timedelta(minutes=20)
    refresh_expires: timedelta = timedelta(days=7)
