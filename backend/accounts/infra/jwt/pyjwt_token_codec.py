# accounts/infra/jwt/pyjwt_token_codec.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from accounts.services._shared.ports import TokenCodec

REQUIRED_CLAIMS = ("sub", "iat", "exp")


@dataclass(frozen=True, slots=True)
class PyJWTTokenCodec(TokenCodec):
    """
    HS256 adapter for :mod:`jwt` (PyJWT).

    ``iat`` and ``exp`` are stamped here from ``now`` and ``expires_in``;
    ``None`` claim values (e.g. a missing role) are left out of the payload.
    Decoding raises :class:`jwt.PyJWTError` subclasses on any failure.
    """

    algorithm: str = "HS256"

    def encode(
        self,
        claims: Mapping[str, Any],
        *,
        secret: str,
        expires_in: timedelta,
        now: datetime | None = None,
    ) -> str:
        issued_at = now or datetime.now(UTC)
        payload = {k: v for k, v in claims.items() if v is not None}
        payload["iat"] = int(issued_at.timestamp())
        payload["exp"] = int((issued_at + expires_in).timestamp())
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def decode(self, token: str, *, secret: str, verify_exp: bool = True) -> dict[str, Any]:
        # Expiry-agnostic reads only need a subject; exp may be missing
        required = REQUIRED_CLAIMS if verify_exp else ("sub",)
        return jwt.decode(
            token,
            secret,
            algorithms=[self.algorithm],
            options={"require": list(required), "verify_exp": verify_exp},
        )
