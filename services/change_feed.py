"""
In-process change feed for loan applications.

Every mutation of the record store publishes one event; connected admin
sessions hold a subscription (an asyncio queue) and refresh when it fires.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

logger = logging.getLogger(__name__)


class ChangeFeed:
    def __init__(self, max_queue_size: int = 100):
        self._max_queue_size = max_queue_size
        self._subscribers: set[asyncio.Queue] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event_type: str, application_id: str, status: Optional[str] = None) -> None:
        event: dict[str, Any] = {"type": event_type, "id": application_id, "status": status}
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                # A stalled subscriber misses events; it refetches the full list anyway
                logger.warning("Change feed subscriber queue full, dropping %s event for %s", event_type, application_id)

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[asyncio.Queue]:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers.add(queue)
        logger.debug("Change feed subscriber added (%d active)", len(self._subscribers))
        try:
            yield queue
        finally:
            self._subscribers.discard(queue)
            logger.debug("Change feed subscriber removed (%d active)", len(self._subscribers))


change_feed = ChangeFeed()
