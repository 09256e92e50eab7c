"""Unit tests for :class:`PyJWTTokenCodec`."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from freezegun import freeze_time

from accounts.infra.jwt.pyjwt_token_codec import PyJWTTokenCodec

SECRET = "codec-secret"


@pytest.fixture()
def codec() -> PyJWTTokenCodec:
    return PyJWTTokenCodec()


class TestPyJWTTokenCodec:
    def test_encode_stamps_iat_and_exp(self, codec):
        now = datetime.now(UTC).replace(microsecond=0)
        token = codec.encode(
            {"sub": "u1", "email": "a@example.com"},
            secret=SECRET,
            expires_in=timedelta(minutes=20),
            now=now,
        )

        payload = codec.decode(token, secret=SECRET)
        assert payload["sub"] == "u1"
        assert payload["iat"] == int(now.timestamp())
        assert payload["exp"] == int(now.timestamp()) + 20 * 60

    def test_none_claims_are_omitted(self, codec):
        token = codec.encode(
            {"sub": "u1", "email": "a@example.com", "role": None},
            secret=SECRET,
            expires_in=timedelta(minutes=5),
        )
        assert "role" not in codec.decode(token, secret=SECRET)

    def test_header_uses_hs256(self, codec):
        token = codec.encode({"sub": "u1"}, secret=SECRET, expires_in=timedelta(minutes=5))
        assert jwt.get_unverified_header(token)["alg"] == "HS256"

    def test_wrong_secret_is_rejected(self, codec):
        token = codec.encode({"sub": "u1"}, secret=SECRET, expires_in=timedelta(minutes=5))
        with pytest.raises(jwt.InvalidSignatureError):
            codec.decode(token, secret="other-secret")

    def test_expired_token_is_rejected(self, codec):
        with freeze_time("2024-01-01 12:00:00"):
            token = codec.encode({"sub": "u1"}, secret=SECRET, expires_in=timedelta(minutes=20))
        with freeze_time("2024-01-01 12:21:00"), pytest.raises(jwt.ExpiredSignatureError):
            codec.decode(token, secret=SECRET)

    def test_expired_token_readable_without_exp_check(self, codec):
        with freeze_time("2024-01-01 12:00:00"):
            token = codec.encode({"sub": "u1"}, secret=SECRET, expires_in=timedelta(minutes=20))
        with freeze_time("2024-01-02 12:00:00"):
            payload = codec.decode(token, secret=SECRET, verify_exp=False)
        assert payload["sub"] == "u1"

    def test_missing_subject_is_rejected(self, codec):
        raw = jwt.encode(
            {"email": "a@example.com", "iat": 1, "exp": 2**31},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(jwt.MissingRequiredClaimError):
            codec.decode(raw, secret=SECRET)

    def test_garbage_is_rejected(self, codec):
        with pytest.raises(jwt.PyJWTError):
            codec.decode("not-a-token", secret=SECRET)
