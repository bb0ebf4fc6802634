"""
Crawl frontier: pending queue, visited set and completion tracking for one crawl run.
"""
from __future__ import annotations

import asyncio
from collections import deque
from typing import AsyncIterable, Awaitable, Callable, Deque, Optional, Set

from link_scout.crawler.link_extractor import normalize_url

__all__ = ["Frontier", "drain_into"]


class Frontier:
    """
    Work queue of pending URLs plus the set of every URL ever accepted.

    All state is guarded by one :class:`asyncio.Condition`, so a membership
    test and the matching insert never interleave with another worker.

    The frontier is *finished* when nothing is pending, nothing is in flight
    and no producer is registered; from then on :meth:`take` returns ``None``.
    :meth:`close` finishes it early.
    """

    def __init__(self) -> None:
        self._visited: Set[str] = set()
        self._pending: Deque[str] = deque()
        self._in_flight = 0
        self._producers = 0
        self._closed = False
        self._cond = asyncio.Condition()

    # -- state views --------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def finished(self) -> bool:
        return self._closed or not (self._pending or self._in_flight or self._producers)

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def seen(self) -> int:
        return len(self._visited)

    def __contains__(self, url: str) -> bool:
        return normalize_url(url) in self._visited

    # -- queue operations ---------------------------------------------------

    async def offer(self, url: str) -> bool:
        """Enqueue *url* unless it was seen before; True if it was accepted."""
        key = normalize_url(url)
        async with self._cond:
            if self._closed or key in self._visited:
                return False
            self._visited.add(key)
            self._pending.append(key)
            self._cond.notify()
            return True

    async def take(self) -> Optional[str]:
        """Wait for the next pending URL; ``None`` once the frontier is finished."""
        async with self._cond:
            await self._cond.wait_for(lambda: bool(self._pending) or self.finished)
            if self._closed or not self._pending:
                return None
            self._in_flight += 1
            return self._pending.popleft()

    async def task_done(self) -> None:
        """Mark the expansion of a taken URL as complete."""
        async with self._cond:
            if self._in_flight <= 0:
                raise ValueError("task_done() called more times than take()")
            self._in_flight -= 1
            if self.finished:
                self._cond.notify_all()

    # -- producers ----------------------------------------------------------

    def add_producer(self) -> None:
        """Register an external producer. Call before its task is scheduled."""
        self._producers += 1

    async def remove_producer(self) -> None:
        async with self._cond:
            self._producers = max(0, self._producers - 1)
            if self.finished:
                self._cond.notify_all()

    async def close(self) -> None:
        """Stop accepting URLs and release every waiting :meth:`take`."""
        async with self._cond:
            self._closed = True
            self._pending.clear()
            self._cond.notify_all()


async def drain_into(source: AsyncIterable[str], sink: Callable[[str], Awaitable[object]]) -> int:
    """Push every item of *source* into *sink* in order; returns how many the sink accepted."""
    accepted = 0
    async for item in source:
        if await sink(item) is not False:
            accepted += 1
    return accepted
