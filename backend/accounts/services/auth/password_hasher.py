"""
Password hashing with scrypt.

Hashes are stored as ``base64(salt) + ":" + base64(derived_key)``. Every call to
:meth:`PasswordHasher.hash` draws a fresh random salt, so two hashes of the same
password differ while both verify.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass

log = logging.getLogger(__name__)

SEPARATOR = ":"


@dataclass(frozen=True, slots=True)
class ScryptParams:
    """
    scrypt cost parameters.

    :param n: CPU/memory cost (power of two).
    :param r: Block size.
    :param p: Parallelization factor.
    :param salt_bytes: Length of the random salt.
    :param key_bytes: Length of the derived key.
    :param maxmem: Memory ceiling handed to OpenSSL (must exceed ``128 * n * r * p``).
    """

    n: int = 16384
    r: int = 8
    p: int = 1
    salt_bytes: int = 32
    key_bytes: int = 64
    maxmem: int = 64 * 1024 * 1024


class PasswordHasher:
    """Derive and verify scrypt password hashes."""

    def __init__(self, params: ScryptParams | None = None) -> None:
        self.params = params or ScryptParams()

    def _derive(self, plaintext: str, salt: bytes) -> bytes:
        p = self.params
        return hashlib.scrypt(
            plaintext.encode("utf-8"),
            salt=salt,
            n=p.n,
            r=p.r,
            p=p.p,
            maxmem=p.maxmem,
            dklen=p.key_bytes,
        )

    def hash(self, plaintext: str) -> str:
        """
        Hash ``plaintext`` with a fresh salt.

        :param plaintext: Password to hash.
        :type plaintext: str
        :returns: ``base64(salt):base64(key)``.
        :rtype: str
        """
        salt = secrets.token_bytes(self.params.salt_bytes)
        key = self._derive(plaintext, salt)
        return SEPARATOR.join(
            (base64.b64encode(salt).decode("ascii"), base64.b64encode(key).decode("ascii"))
        )

    def verify(self, plaintext: str, hashed: str) -> bool:
        """
        Check ``plaintext`` against a stored hash.

        Malformed hashes (missing half, invalid base64, non-string input)
        yield ``False``; this method never raises.

        :param plaintext: Candidate password.
        :type plaintext: str
        :param hashed: Stored ``base64(salt):base64(key)`` string.
        :type hashed: str
        :returns: ``True`` only when the derived key matches.
        :rtype: bool
        """
        if not isinstance(plaintext, str) or not isinstance(hashed, str):
            return False

        salt_b64, _, key_b64 = hashed.partition(SEPARATOR)
        if not salt_b64 or not key_b64:
            return False

        try:
            salt = base64.b64decode(salt_b64, validate=True)
            expected = base64.b64decode(key_b64, validate=True)
        except (binascii.Error, ValueError):
            return False
        if not expected:
            return False

        try:
            candidate = self._derive(plaintext, salt)
        except ValueError:
            log.warning("scrypt derivation failed during verification", exc_info=True)
            return False

        if len(candidate) != len(expected):
            return False
        return hmac.compare_digest(candidate, expected)
