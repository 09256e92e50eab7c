# accounts/services/auth/service.py
from __future__ import annotations

import logging
import secrets
from datetime import timedelta

import jwt

from accounts.models.user import DEFAULT_ROLE
from accounts.services._shared.base import BaseService, ServiceContext
from accounts.services._shared.errors import (
    INVALID_CREDENTIALS_MESSAGE,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    StoreUnavailableError,
)
from accounts.services._shared.ports import CredentialStore, NewCredential
from accounts.services.auth.dto import (
    AuthenticatedIdentity,
    LoginIn,
    LoginOut,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    RegisterOut,
    UserPublicOut,
)
from accounts.services.auth.password_hasher import PasswordHasher
from accounts.services.auth.session_manager import SessionManager, TokenKind

log = logging.getLogger(__name__)

# Revocation window used when a token carries no ``exp`` claim
LOGOUT_FALLBACK_WINDOWS: dict[TokenKind, timedelta] = {
    TokenKind.ACCESS: timedelta(minutes=20),
    TokenKind.REFRESH: timedelta(days=7),
}


class CredentialService(BaseService):
    """
    Credential lifecycle service (register / login / refresh / logout).

    Passwords are checked through :class:`PasswordHasher`; tokens are issued,
    verified and revoked through :class:`SessionManager`. Persistence goes
    through the injected :class:`CredentialStore`.
    """

    def __init__(
        self,
        *,
        hasher: PasswordHasher,
        sessions: SessionManager,
        credentials: CredentialStore,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param hasher: Password hashing strategy.
        :param sessions: Token lifecycle manager.
        :param credentials: Persistence collaborator for credential records.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.hasher = hasher
        self.sessions = sessions
        self.credentials = credentials
        # Verified against on unknown emails so both login failures cost one derivation
        self._decoy_hash = hasher.hash(secrets.token_urlsafe(16))

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> RegisterOut:
        """
        Register a new identity with the default role.

        :param dto: Registration input.
        :returns: Public fields of the created user.
        :raises ConflictError: If the email is already registered.
        """
        email = dto.email.lower().strip()
        if self.credentials.find_credential_by_email(email) is not None:
            raise ConflictError("User", "Email already registered")

        record = self.credentials.create_credential(
            NewCredential(
                email=email,
                name=dto.name.strip(),
                password_hash=self.hasher.hash(dto.password),
                role=DEFAULT_ROLE,
                address=dto.address,
            )
        )
        log.info("user registered", extra={"user_id": record.id})
        return RegisterOut(user=UserPublicOut.from_record(record))

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and issue a fresh token pair.

        Unknown email and wrong password are indistinguishable to the caller.

        :param dto: Login input.
        :returns: Token pair and public user fields.
        :raises AuthenticationError: If credentials are invalid.
        """
        record = self.credentials.find_credential_by_email(dto.email.lower().strip())
        if record is None:
            self.hasher.verify(dto.password, self._decoy_hash)
            log.info("login failed: unknown email")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        if not self.hasher.verify(dto.password, record.password_hash):
            log.info("login failed: password mismatch", extra={"user_id": record.id})
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        pair = self.sessions.generate_tokens(record.id, record.email, record.role)
        log.info("login succeeded", extra={"user_id": record.id})
        return LoginOut(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=UserPublicOut.from_record(record),
        )

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> str:
        """
        Exchange a valid refresh token for a new access token.

        :param dto: Refresh input.
        :returns: Encoded access token with a fresh ``jti``.
        :raises AuthenticationError: If the token is invalid, revoked or its
            user no longer exists.
        """
        claims = self.sessions.verify_refresh_token(dto.refresh_token)
        if self.credentials.find_credential_by_id(claims.sub) is None:
            log.info("refresh rejected: user gone", extra={"user_id": claims.sub})
            raise AuthenticationError()
        return self.sessions.issue_access_token(claims)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Revoke the given tokens for the rest of their lifetime.

        Best effort: unreadable tokens and store failures are logged, never
        raised.

        :param dto: Tokens to revoke; either may be missing.
        """
        if dto.access_token:
            self._revoke_quietly(dto.access_token, TokenKind.ACCESS)
        if dto.refresh_token:
            self._revoke_quietly(dto.refresh_token, TokenKind.REFRESH)

    def _revoke_quietly(self, token: str, kind: TokenKind) -> None:
        try:
            claims = self.sessions.read_claims(token, kind)
        except (jwt.PyJWTError, KeyError, TypeError, ValueError) as exc:
            log.info("logout: %s token unreadable (%s)", kind.value, type(exc).__name__)
            return

        if not claims.jti:
            log.info("logout: %s token has no jti", kind.value)
            return

        if claims.exp is not None:
            expires_at = claims.exp
        else:
            expires_at = int((self.sessions.now() + LOGOUT_FALLBACK_WINDOWS[kind]).timestamp())

        try:
            self.sessions.blacklist_token(claims.jti, expires_at)
        except StoreUnavailableError:
            log.warning(
                "logout: could not revoke %s token", kind.value, extra={"jti": claims.jti}
            )

    # ------------------------------------------------------------------ #
    # Identity
    # ------------------------------------------------------------------ #

    def whoami(self, identity: AuthenticatedIdentity) -> UserPublicOut:
        """
        Return public fields of the authenticated user.

        :raises NotFoundError: If the account no longer exists.
        """
        record = self.credentials.find_credential_by_id(identity.user_id)
        if record is None:
            raise NotFoundError("User", identity.user_id)
        return UserPublicOut.from_record(record)
