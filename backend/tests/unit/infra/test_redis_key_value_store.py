"""Unit tests for :class:`RedisKeyValueStore` using fakeredis."""

from __future__ import annotations

from unittest.mock import MagicMock

import fakeredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import NoPermissionError, ReadOnlyError, ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from accounts.infra.redis.redis_key_value_store import RedisKeyValueStore
from accounts.services._shared.errors import StoreUnavailableError


@pytest.fixture
def r():
    """Provide a fresh FakeRedis instance for each test."""
    client = fakeredis.FakeRedis(decode_responses=True)
    client.flushall()
    return client


@pytest.fixture
def store(r) -> RedisKeyValueStore:
    return RedisKeyValueStore(r)


class TestRedisKeyValueStore:
    def test_set_get_with_ttl(self, store, r):
        store.set("k", "v", ttl=30)

        assert store.get("k") == "v"
        assert 0 < r.ttl("k") <= 30

    def test_set_without_ttl_is_persistent(self, store, r):
        store.set("k", "v")
        assert r.ttl("k") == -1

    def test_set_overwrites(self, store):
        store.set("k", "v1", ttl=30)
        store.set("k", "v2", ttl=30)
        assert store.get("k") == "v2"

    def test_missing_key(self, store):
        assert store.get("nope") is None
        assert store.exists("nope") is False

    def test_exists_and_delete(self, store):
        store.set("a", "1")
        store.set("b", "2")

        assert store.exists("a") is True
        assert store.delete("a", "b", "c") == 2
        assert store.exists("a") is False

    def test_delete_without_keys(self, store):
        assert store.delete() == 0

    def test_bytes_client_values_are_decoded(self):
        store = RedisKeyValueStore(fakeredis.FakeRedis())
        store.set("k", "välue")
        assert store.get("k") == "välue"

    @pytest.mark.parametrize(
        "error",
        [RedisConnectionError, RedisTimeoutError, ReadOnlyError, NoPermissionError, ResponseError],
    )
    @pytest.mark.parametrize(
        "call",
        [
            lambda s: s.get("k"),
            lambda s: s.set("k", "v", ttl=1),
            lambda s: s.exists("k"),
            lambda s: s.delete("k"),
        ],
    )
    def test_server_refusals_become_store_unavailable(self, error, call):
        client = MagicMock()
        for name in ("get", "set", "exists", "delete"):
            getattr(client, name).side_effect = error("down")

        with pytest.raises(StoreUnavailableError):
            call(RedisKeyValueStore(client))

    def test_read_only_replica_write_is_logged(self, caplog):
        client = MagicMock()
        client.set.side_effect = ReadOnlyError("You can't write against a read only replica.")

        with pytest.raises(StoreUnavailableError):
            RedisKeyValueStore(client).set("k", "v", ttl=5)
        assert "redis SET failed" in caplog.text
