"""Event bus and view invalidation for the alumni portal.

`EventBus` publishes JSON messages to Kafka through `confluent_kafka.Producer`
when bootstrap servers are configured, and only logs them otherwise (dev/test).

`ViewInvalidator` is the post-commit side effect of every mutating workflow:
it tells dependent views that their cached data is stale. Notifications are
fire-and-forget background tasks; a failed publish is logged and never
reaches the workflow's result.
"""

import asyncio
import json
import logging
from typing import Any, Optional, Set

from confluent_kafka import Producer

from .config import Settings
from .timeutil import utcnow, to_iso_utc

log = logging.getLogger(__name__)

# view keys, one per cached page of the web front end
DASHBOARD = "dashboard"
ADMIN_DASHBOARD = "dashboard/admin"
ALUMNI_DASHBOARD = "dashboard/alumni"
STUDENT_DASHBOARD = "dashboard/student"
CREATE_PROFILE = "create-profile"

FLUSH_TIMEOUT_SEC = 5.0


class EventBus:
    """Thin Kafka publisher; logs only when no bootstrap servers are set."""

    def __init__(self, bootstrap: Optional[str] = None) -> None:
        """Create the producer when `bootstrap` is given.

        Args:
            bootstrap: Kafka bootstrap servers, or None for log-only mode.
        """
        self.kafka_bootstrap = bootstrap
        self._producer = Producer({'bootstrap.servers': bootstrap}) if bootstrap else None

    def publish(self, topic: str, key: str, value: dict[str, Any]) -> None:
        """Publish a message to Kafka (blocking until flushed) and log it.

        Args:
            topic: Kafka topic name.
            key: Message key (used for partitioning).
            value: JSON-serializable payload dictionary.
        """
        payload = json.dumps(value).encode("utf-8")
        if self._producer:
            self._producer.produce(topic, key=key, value=payload)
            remaining = self._producer.flush(FLUSH_TIMEOUT_SEC)
            if remaining:
                raise RuntimeError(f"{remaining} message(s) not delivered to {topic}")
        log.info(f"PUBLISH topic={topic} key={key} value={value}")

    def close(self) -> None:
        if self._producer:
            self._producer.flush(FLUSH_TIMEOUT_SEC)


class ViewInvalidator:
    """Fire-and-forget notifier for stale views."""

    def __init__(self, bus: EventBus, topic: str) -> None:
        self._bus = bus
        self._topic = topic
        self._pending: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, s: Settings) -> "ViewInvalidator":
        return cls(EventBus(s.KAFKA_BOOTSTRAP), s.INVALIDATION_TOPIC)

    def invalidate(self, *views: str) -> None:
        """Schedule one notification per view and return immediately."""
        for view in views:
            task = asyncio.get_running_loop().create_task(self._send(view))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def _send(self, view: str) -> None:
        message = {"view": view, "ts": to_iso_utc(utcnow())}
        try:
            await asyncio.to_thread(self._bus.publish, self._topic, view, message)
        except Exception:
            log.warning("View invalidation failed for %s", view, exc_info=True)

    async def drain(self) -> None:
        """Wait for in-flight notifications (tests and shutdown)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        await asyncio.to_thread(self._bus.close)
