from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any, Protocol


class TokenCodec(Protocol):
    """
    Port for signing and decoding compact tokens.

    Implementations raise their library's decode error on any failure
    (bad signature, malformed token, expiry); the session manager collapses
    those into a single authentication error.
    """

    def encode(
        self,
        claims: Mapping[str, Any],
        *,
        secret: str,
        expires_in: timedelta,
        now: datetime | None = None,
    ) -> str: ...

    def decode(self, token: str, *, secret: str, verify_exp: bool = True) -> dict[str, Any]: ...
