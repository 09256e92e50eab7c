"""
accounts.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) the service layer depends on.

Modules
-------
- :mod:`token_codec`:
    Defines :class:`~.TokenCodec` : signing and decoding of compact tokens.

- :mod:`key_value_store`:
    Defines :class:`~.KeyValueStore` : revocation entries and profile cache.

- :mod:`credential_store`:
    Defines :class:`~.CredentialStore` and the :class:`~.CredentialRecord`
    value the credential service works with.

- :mod:`event_publisher`:
    Defines :class:`~.EventPublisher` : outbound fire-and-forget events.

Design Notes
------------
Concrete adapters (Redis, PyJWT, SQLAlchemy) live under ``accounts.infra``.
Each port module ships an in-memory double for unit tests.
"""

from __future__ import annotations

from .credential_store import (
    CredentialRecord,
    CredentialStore,
    InMemoryCredentialStore,
    NewCredential,
)
from .event_publisher import EventPublisher, InMemoryEventPublisher
from .key_value_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    UnavailableKeyValueStore,
)
from .token_codec import TokenCodec

__all__ = [
    "TokenCodec",
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "UnavailableKeyValueStore",
    "CredentialRecord",
    "CredentialStore",
    "InMemoryCredentialStore",
    "NewCredential",
    "EventPublisher",
    "InMemoryEventPublisher",
]
