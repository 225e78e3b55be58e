"""SessionTicker — periodic tick signal for one auction session.

Runs as an asyncio task, sending one tick per interval through the service
(so it takes the same per-session lock as bid submissions) until the
auction closes. A failed tick is logged and retried on the next interval.
"""
import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from src.pb_common.errors import AuctionNotOpenError

logger = logging.getLogger(__name__)

TickFn = Callable[[str], Awaitable[bool]]  # returns True while the auction is still open


class SessionTicker:
    def __init__(self, auction_id: str, tick: TickFn, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be > 0, got {interval_seconds}")
        self.auction_id = auction_id
        self._tick = tick
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=f"ticker-{self.auction_id}")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _run(self) -> None:
        logger.info("Ticker started: auction=%s interval=%.2fs", self.auction_id, self._interval)
        while True:
            await asyncio.sleep(self._interval)
            try:
                still_open = await self._tick(self.auction_id)
            except AuctionNotOpenError:
                # Closed by an abort between two ticks
                break
            except Exception:
                logger.exception("Tick failed: auction=%s, retrying next interval", self.auction_id)
                continue
            if not still_open:
                break
        logger.info("Ticker stopped: auction=%s", self.auction_id)
