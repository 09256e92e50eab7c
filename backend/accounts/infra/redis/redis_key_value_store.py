from __future__ import annotations

import logging
from typing import cast

import redis
from redis.exceptions import RedisError

from accounts.services._shared.errors import StoreUnavailableError
from accounts.services._shared.ports import KeyValueStore

log = logging.getLogger(__name__)


class RedisKeyValueStore(KeyValueStore):
    """
    :class:`KeyValueStore` backed by a :class:`redis.Redis` client.

    Every :class:`redis.exceptions.RedisError` surfaces as
    :class:`StoreUnavailableError`, including read-only replica and ACL
    refusals. Callers decide whether to fail open (cache) or closed
    (revocation checks).
    """

    def __init__(self, r: redis.Redis):
        self.r = r

    @staticmethod
    def _text(value: bytes | str | None) -> str | None:
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def get(self, key: str) -> str | None:
        try:
            return self._text(self.r.get(key))
        except RedisError as exc:
            log.warning("redis GET failed", extra={"cache_key": key})
            raise StoreUnavailableError(f"GET {key}") from exc

    def set(self, key: str, value: str, *, ttl: int | None = None) -> None:
        try:
            # ex=None keeps the key persistent
            self.r.set(key, value, ex=ttl)
        except RedisError as exc:
            log.warning("redis SET failed", extra={"cache_key": key})
            raise StoreUnavailableError(f"SET {key}") from exc

    def exists(self, key: str) -> bool:
        try:
            return cast(int, self.r.exists(key)) == 1
        except RedisError as exc:
            log.warning("redis EXISTS failed", extra={"cache_key": key})
            raise StoreUnavailableError(f"EXISTS {key}") from exc

    def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return cast(int, self.r.delete(*keys))
        except RedisError as exc:
            log.warning("redis DEL failed", extra={"cache_key": ",".join(keys)})
            raise StoreUnavailableError(f"DEL {' '.join(keys)}") from exc
