"""
Background mirroring of discovered pages with ``wget``.

A :class:`Downloader` is fed every emitted URL; the ones matching the crawl
filter are checked with a HEAD request and handed to ``wget -r``. Failures
are logged and counted, they never stop the crawl.
"""
from __future__ import annotations

import asyncio
from asyncio.subprocess import DEVNULL, PIPE
from pathlib import Path
from typing import Optional, Sequence, Set, Union

from aiohttp import ClientError, ClientSession, ClientTimeout

from link_scout.crawler.url_filter import UrlFilter
from link_scout.logger import logger

__all__ = ["Downloader", "WGET_ARGS"]

WGET_ARGS: Sequence[str] = ("--no-check-certificate", "-erobots=off", "-r")


class Downloader:
    """
    Async context manager running one ``wget`` task per accepted URL.

    On a clean exit it waits for every pending download; when the block is
    left with an exception (cancellation included) pending downloads are
    cancelled and their processes killed.
    """

    def __init__(
        self,
        url_filter: UrlFilter,
        *,
        program: str = "wget",
        timeout: float = 10.0,
        user_agent: Optional[str] = None,
        directory: Union[str, Path, None] = None,
    ) -> None:
        self.url_filter = url_filter
        self.program = program
        self.timeout = timeout
        self.user_agent = user_agent
        self.directory = Path(directory) if directory is not None else None
        self.succeeded = 0
        self.failed = 0
        self._tasks: Set[asyncio.Task] = set()
        self._session: Optional[ClientSession] = None

    async def __aenter__(self) -> Downloader:
        headers = {"User-Agent": self.user_agent} if self.user_agent else None
        self._session = ClientSession(timeout=ClientTimeout(total=self.timeout), headers=headers)
        if self.directory is not None:
            self.directory.mkdir(parents=True, exist_ok=True)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                await asyncio.gather(*self._tasks)
            else:
                for task in self._tasks:
                    task.cancel()
                await asyncio.gather(*self._tasks, return_exceptions=True)
        finally:
            if self._session is not None:
                await self._session.close()
                self._session = None
        logger.info("Downloads finished: %d succeeded, %d failed", self.succeeded, self.failed)

    def submit(self, url: str) -> bool:
        """Schedule *url* for download when it matches the filter."""
        if self._session is None:
            raise RuntimeError("Downloader used outside of 'async with'")
        if not self.url_filter.should_expand(url):
            return False
        task = asyncio.create_task(self._download(url), name=f"wget {url}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def _is_reachable(self, url: str) -> bool:
        try:
            async with self._session.head(url, allow_redirects=True) as resp:
                return 200 <= resp.status < 300
        except (ClientError, asyncio.TimeoutError):
            return False

    async def _download(self, url: str) -> None:
        if not await self._is_reachable(url):
            logger.warning("Not downloading %s: HEAD request failed", url)
            self.failed += 1
            return

        try:
            proc = await asyncio.create_subprocess_exec(
                self.program, *WGET_ARGS, url,
                stdout=DEVNULL,
                stderr=PIPE,
                cwd=str(self.directory) if self.directory is not None else None,
            )
        except OSError as exc:
            logger.warning("Could not start %s for %s: %s", self.program, url, exc)
            self.failed += 1
            return

        try:
            _, stderr = await proc.communicate()
        except asyncio.CancelledError:
            if proc.returncode is None:
                proc.kill()
            raise

        if proc.returncode != 0:
            tail = (stderr or b"").decode("utf-8", errors="replace").strip()[-300:]
            logger.warning("%s failed for %s with status %s: %s", self.program, url, proc.returncode, tail)
            self.failed += 1
            return
        self.succeeded += 1
        logger.debug("Downloaded %s", url)
