from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol

from accounts.services._shared.errors import StoreUnavailableError


class KeyValueStore(Protocol):
    """
    Port for the shared key-value store (revocation entries, profile cache).

    Adapters translate timeouts and connection failures into
    :class:`~accounts.services._shared.errors.StoreUnavailableError`.
    Writes are idempotent.
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str, *, ttl: int | None = None) -> None: ...
    def exists(self, key: str) -> bool: ...
    def delete(self, *keys: str) -> int: ...


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store honouring TTLs, used in unit tests."""

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: dict[str, tuple[str, float | None]] = {}

    def _live(self, key: str) -> tuple[str, float | None] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._data[key]
            return None
        return entry

    def get(self, key: str) -> str | None:
        entry = self._live(key)
        return entry[0] if entry else None

    def set(self, key: str, value: str, *, ttl: int | None = None) -> None:
        expires_at = self._clock() + ttl if ttl is not None else None
        self._data[key] = (value, expires_at)

    def exists(self, key: str) -> bool:
        return self._live(key) is not None

    def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self._data.pop(key, None) is not None)

    def ttl(self, key: str) -> float | None:
        """Seconds left for ``key``; ``None`` when missing or persistent."""
        entry = self._live(key)
        if entry is None or entry[1] is None:
            return None
        return entry[1] - self._clock()


class UnavailableKeyValueStore(KeyValueStore):
    """Store double whose every call fails as if the backend were down."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def _fail(self, op: str) -> StoreUnavailableError:
        self.calls.append(op)
        return StoreUnavailableError(f"{op}: connection refused")

    def get(self, key: str) -> str | None:
        raise self._fail("get")

    def set(self, key: str, value: str, *, ttl: int | None = None) -> None:
        raise self._fail("set")

    def exists(self, key: str) -> bool:
        raise self._fail("exists")

    def delete(self, *keys: str) -> int:
        raise self._fail("delete")
