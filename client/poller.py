"""
Cooperative status poller.

One call as soon as it starts, then one per interval until stopped. Ticks run
one after another on a single task, so a slow response can delay the next
tick but never overtake a later one. A failed tick is logged and the schedule
carries on.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from config import settings
from schemas.application import ApplicationStatusView

logger = logging.getLogger(__name__)

FetchFn = Callable[[], Awaitable[ApplicationStatusView]]
SnapshotFn = Callable[[ApplicationStatusView], None]
ErrorFn = Callable[[Exception], None]


class StatusPoller:
    def __init__(
        self,
        fetch: FetchFn,
        interval: Optional[float] = None,
        on_snapshot: Optional[SnapshotFn] = None,
        on_error: Optional[ErrorFn] = None,
    ):
        self.fetch = fetch
        self.interval = settings.poll_interval_seconds if interval is None else interval
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.latest: Optional[ApplicationStatusView] = None
        self.ticks = 0
        self.failures = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def __aenter__(self) -> "StatusPoller":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def tick(self) -> Optional[ApplicationStatusView]:
        self.ticks += 1
        try:
            snapshot = await self.fetch()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.failures += 1
            logger.warning("Status poll failed (tick %d): %s", self.ticks, e)
            if self.on_error:
                try:
                    self.on_error(e)
                except Exception:
                    logger.exception("Error callback failed (tick %d)", self.ticks)
            return None
        self.latest = snapshot
        if self.on_snapshot:
            try:
                self.on_snapshot(snapshot)
            except Exception:
                logger.exception("Snapshot callback failed (tick %d)", self.ticks)
        return snapshot

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time()
        while True:
            await self.tick()
            next_at += self.interval
            await asyncio.sleep(max(0.0, next_at - loop.time()))
