from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import redis
from redis.exceptions import RedisError

from accounts.services._shared.ports import EventPublisher

log = logging.getLogger(__name__)


class RedisEventPublisher(EventPublisher):
    """
    Publish events on Redis pub/sub channels named ``<source>.<routing_key>``.

    The payload is wrapped in an envelope carrying ``eventId``, ``timestamp``
    and ``source``. Delivery is fire-and-forget: failures are logged and
    never raised to the caller.
    """

    def __init__(self, r: redis.Redis, *, source: str = "user-service"):
        self.r = r
        self.source = source

    def channel(self, routing_key: str) -> str:
        return f"{self.source}.{routing_key}"

    def envelope(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "eventId": str(uuid4()),
            "timestamp": datetime.now(UTC).isoformat(),
            "source": self.source,
            **payload,
        }

    def publish(self, routing_key: str, payload: Mapping[str, Any]) -> None:
        message = self.envelope(payload)
        try:
            receivers = self.r.publish(self.channel(routing_key), json.dumps(message, default=str))
        except RedisError:
            log.warning(
                "event publish failed",
                extra={"event": routing_key},
                exc_info=True,
            )
            return
        log.info(
            "event published to %s subscriber(s)",
            receivers,
            extra={"event": routing_key},
        )
