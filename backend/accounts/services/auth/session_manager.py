"""
Token lifecycle: issuance, verification, access-token renewal and revocation.

Access and refresh tokens of one pair share a single ``jti``; revoking that
identifier (logout) invalidates both halves at once. Revocation entries live
in the key-value store under ``token:blacklist:{jti}`` and expire together
with the token they revoke.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

import jwt

from accounts.services._shared.errors import AuthenticationError, StoreUnavailableError
from accounts.services._shared.ports import KeyValueStore, TokenCodec
from accounts.services.auth.dto import AuthTokenConfig, TokenClaims, TokenPairOut

log = logging.getLogger(__name__)

BLACKLIST_KEY_PREFIX = "token:blacklist:"


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


def blacklist_key(jti: str) -> str:
    return f"{BLACKLIST_KEY_PREFIX}{jti}"


def new_jti() -> str:
    return str(uuid4())


class SessionManager:
    """
    Issue, verify, renew and revoke access/refresh tokens.

    All verification failures (bad signature, malformed token, expiry,
    revocation, unreachable store) raise the same
    :class:`AuthenticationError`; the cause is only logged.
    """

    def __init__(
        self,
        *,
        codec: TokenCodec,
        store: KeyValueStore,
        cfg: AuthTokenConfig,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        :param codec: Token signing adapter.
        :param store: Key-value store holding revocation entries.
        :param cfg: Secrets and lifetimes.
        :param clock: Returns the current aware UTC time (injectable for tests).
        """
        self.codec = codec
        self.store = store
        self.cfg = cfg
        self._clock = clock or (lambda: datetime.now(UTC))

    def now(self) -> datetime:
        """Current time according to the injected clock."""
        return self._clock()

    # ------------------------------------------------------------------ #
    # Issuance
    # ------------------------------------------------------------------ #

    def _secret(self, kind: TokenKind) -> str:
        return self.cfg.access_secret if kind is TokenKind.ACCESS else self.cfg.refresh_secret

    def _sign(
        self, kind: TokenKind, *, subject_id: str, email: str, role: str | None, jti: str
    ) -> str:
        claims = {"sub": str(subject_id), "email": email, "role": role, "jti": jti}
        expires_in = (
            self.cfg.access_expires if kind is TokenKind.ACCESS else self.cfg.refresh_expires
        )
        return self.codec.encode(
            claims, secret=self._secret(kind), expires_in=expires_in, now=self._clock()
        )

    def generate_tokens(self, subject_id: str, email: str, role: str | None = None) -> TokenPairOut:
        """
        Issue an access/refresh pair sharing one fresh ``jti``.

        :param subject_id: User identifier (``sub`` claim).
        :type subject_id: str
        :param email: Email claim.
        :type email: str
        :param role: Optional role claim.
        :type role: str | None
        :returns: Signed token pair.
        :rtype: TokenPairOut
        """
        jti = new_jti()
        return TokenPairOut(
            access_token=self._sign(
                TokenKind.ACCESS, subject_id=subject_id, email=email, role=role, jti=jti
            ),
            refresh_token=self._sign(
                TokenKind.REFRESH, subject_id=subject_id, email=email, role=role, jti=jti
            ),
        )

    # ------------------------------------------------------------------ #
    # Verification
    # ------------------------------------------------------------------ #

    def _verify(self, token: str, kind: TokenKind) -> TokenClaims:
        try:
            payload = self.codec.decode(token, secret=self._secret(kind))
            claims = TokenClaims.from_payload(payload)
        except (jwt.PyJWTError, KeyError, TypeError, ValueError) as exc:
            log.info("%s token rejected: %s", kind.value, type(exc).__name__)
            raise AuthenticationError() from None

        try:
            revoked = self.is_token_blacklisted(claims.jti)
        except StoreUnavailableError:
            # Fail closed: an unverifiable revocation state denies the request
            log.warning(
                "%s token rejected: revocation store unavailable",
                kind.value,
                extra={"jti": claims.jti},
            )
            raise AuthenticationError() from None

        if revoked:
            log.info("%s token rejected: revoked", kind.value, extra={"jti": claims.jti})
            raise AuthenticationError()
        return claims

    def verify_access_token(self, token: str) -> TokenClaims:
        """
        Verify signature, expiry and revocation of an access token.

        :raises AuthenticationError: On any failure.
        """
        return self._verify(token, TokenKind.ACCESS)

    def verify_refresh_token(self, token: str) -> TokenClaims:
        """
        Verify signature, expiry and revocation of a refresh token.

        :raises AuthenticationError: On any failure.
        """
        return self._verify(token, TokenKind.REFRESH)

    def refresh_access_token(self, refresh_token: str) -> str:
        """
        Issue a new access token from a valid refresh token.

        The new access token carries the same ``sub``/``email``/``role`` and a
        fresh ``jti``. The refresh token itself is not rotated.

        :raises AuthenticationError: When the refresh token fails verification.
        """
        return self.issue_access_token(self.verify_refresh_token(refresh_token))

    def issue_access_token(self, claims: TokenClaims) -> str:
        """
        Sign a new access token for already verified refresh ``claims``.

        Keeps ``sub``/``email``/``role`` and assigns a fresh ``jti``.
        """
        return self._sign(
            TokenKind.ACCESS,
            subject_id=claims.sub,
            email=claims.email,
            role=claims.role,
            jti=new_jti(),
        )

    def read_claims(self, token: str, kind: TokenKind) -> TokenClaims:
        """
        Return the claims of a correctly signed token, ignoring expiry and
        revocation. Used to find the ``jti``/``exp`` of a token being revoked.

        :raises jwt.PyJWTError: When the signature or structure is invalid.
        """
        payload = self.codec.decode(token, secret=self._secret(kind), verify_exp=False)
        return TokenClaims.from_payload(payload)

    # ------------------------------------------------------------------ #
    # Revocation
    # ------------------------------------------------------------------ #

    def blacklist_token(self, jti: str, expires_at: int) -> None:
        """
        Revoke ``jti`` until ``expires_at`` (epoch seconds).

        Tokens already past expiry are not written.

        :raises StoreUnavailableError: When the store cannot be reached.
        """
        now = self._clock()
        remaining = int(expires_at - now.timestamp())
        if remaining <= 0:
            log.debug("skip blacklist of expired token", extra={"jti": jti})
            return
        entry = json.dumps({"jti": jti, "revokedAt": now.isoformat()})
        self.store.set(blacklist_key(jti), entry, ttl=remaining)
        log.info("token revoked for %ss", remaining, extra={"jti": jti})

    def is_token_blacklisted(self, jti: str | None = None) -> bool:
        """
        Return whether ``jti`` has been revoked. ``None`` is never revoked and
        does not touch the store.

        :raises StoreUnavailableError: When the store cannot be reached.
        """
        if not jti:
            return False
        return self.store.exists(blacklist_key(jti))
