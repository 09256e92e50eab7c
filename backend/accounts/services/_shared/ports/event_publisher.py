from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol


class EventPublisher(Protocol):
    """
    Port for fire-and-forget domain notifications.

    ``routing_key`` names the event (e.g. ``banking-details.updated``); the
    adapter decides the transport and envelope.
    """

    def publish(self, routing_key: str, payload: Mapping[str, Any]) -> None: ...


class InMemoryEventPublisher(EventPublisher):
    """Collects published events in order for assertions in tests."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def publish(self, routing_key: str, payload: Mapping[str, Any]) -> None:
        self.events.append((routing_key, dict(payload)))
