"""
Crawl engine: a fixed pool of asyncio workers over one Frontier.

Each worker loops take → fetch → (if the filter matches) extract → offer children → emit.
Results are streamed to the caller through an async generator as soon as a
worker produces them.
"""
from __future__ import annotations

import asyncio
import time
from typing import AsyncIterable, AsyncIterator, Iterable, List, Optional

from link_scout.crawler.fetcher import Fetcher
from link_scout.crawler.frontier import Frontier, drain_into
from link_scout.crawler.link_extractor import extract_links
from link_scout.crawler.models import CrawlResult, CrawlStats
from link_scout.crawler.url_filter import UrlFilter
from link_scout.errors import FetchError
from link_scout.logger import logger

__all__ = ["CrawlEngine"]

_DONE = None


class CrawlEngine:
    """Concurrent, filter-gated link discovery."""

    def __init__(self, fetcher: Fetcher, url_filter: UrlFilter, concurrency: int = 8) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.fetcher = fetcher
        self.url_filter = url_filter
        self.concurrency = concurrency
        self.stats = CrawlStats()
        self._frontier: Optional[Frontier] = None

    async def cancel(self) -> None:
        """Stop the running crawl; in-flight fetches finish and their results are dropped."""
        if self._frontier is not None:
            await self._frontier.close()

    async def run(
        self,
        seeds: Iterable[str],
        sources: Iterable[AsyncIterable[str]] = (),
    ) -> AsyncIterator[CrawlResult]:
        """
        Crawl from *seeds* plus every URL produced by *sources*.

        Yields one :class:`CrawlResult` per distinct URL. The stream ends when
        the frontier is exhausted; closing the generator cancels the crawl.
        """
        frontier = Frontier()
        self._frontier = frontier
        self.stats = CrawlStats()
        start = time.monotonic()

        for seed in seeds:
            if not await frontier.offer(seed):
                logger.debug("Duplicate seed ignored: %s", seed)

        feeders: List[asyncio.Task] = []
        for source in sources:
            frontier.add_producer()
            feeders.append(asyncio.create_task(self._feed(frontier, source)))

        results: asyncio.Queue[Optional[CrawlResult]] = asyncio.Queue()
        workers = [
            asyncio.create_task(self._worker(frontier, results), name=f"crawl-worker-{i}")
            for i in range(self.concurrency)
        ]
        closer = asyncio.create_task(self._signal_when_done(workers, results))
        logger.info("Crawl started: %d seed(s), %d extra source(s), %d worker(s)",
                    frontier.seen, len(feeders), self.concurrency)

        try:
            while True:
                result = await results.get()
                if result is _DONE:
                    break
                self.stats.emitted += 1
                yield result
        finally:
            await frontier.close()
            for task in feeders:
                task.cancel()
            await asyncio.gather(*feeders, return_exceptions=True)
            await asyncio.gather(*workers, return_exceptions=True)
            await closer
            duration = time.monotonic() - start
            logger.info(
                "Crawl finished: %d URLs (%d expanded, %d failed) in %.2f s",
                self.stats.emitted, self.stats.expanded, self.stats.failed, duration,
            )

        for task in workers:
            if not task.cancelled() and task.exception() is not None:
                raise task.exception()

    async def _feed(self, frontier: Frontier, source: AsyncIterable[str]) -> None:
        try:
            added = await drain_into(source, frontier.offer)
            logger.debug("Source exhausted, %d new URL(s) queued", added)
        finally:
            await frontier.remove_producer()

    @staticmethod
    async def _signal_when_done(workers: List[asyncio.Task], results: asyncio.Queue) -> None:
        await asyncio.wait(workers)
        results.put_nowait(_DONE)

    async def _worker(self, frontier: Frontier, results: asyncio.Queue) -> None:
        while True:
            url = await frontier.take()
            if url is None:
                return
            try:
                result = await self._process(frontier, url)
                if not frontier.closed:
                    results.put_nowait(result)
            finally:
                await frontier.task_done()

    async def _process(self, frontier: Frontier, url: str) -> CrawlResult:
        try:
            page = await self.fetcher.fetch(url)
        except FetchError as exc:
            logger.warning("Skipped %s", exc)
            self.stats.failed += 1
            self.stats.errors.append(exc)
            return CrawlResult(url, error=exc)
        self.stats.fetched += 1

        if not self.url_filter.should_expand(url):
            return CrawlResult(url)

        children = extract_links(page.url, page.content) if page.is_html else []
        accepted = 0
        for child in children:
            if await frontier.offer(child):
                accepted += 1
        self.stats.expanded += 1
        self.stats.links_offered += len(children)
        self.stats.links_accepted += accepted
        logger.debug("Expanded %s: %d links, %d new", url, len(children), accepted)
        return CrawlResult(url, expanded=True, links_found=len(children))
