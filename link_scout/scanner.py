"""
Wrapper that turns a CrawlConfig into a running crawl.
"""
from __future__ import annotations

from contextlib import aclosing
from typing import AsyncIterable, AsyncIterator, List

from aiohttp import ClientSession, ClientTimeout

from link_scout.config import CrawlConfig
from link_scout.crawler import CrawlEngine, CrawlResult, Fetcher, UrlFilter
from link_scout.logger import logger
from link_scout.search import SiteSearchProvider
from link_scout.utils import is_http_url


async def start_scan(cfg: CrawlConfig) -> AsyncIterator[CrawlResult]:
    """
    Run one crawl described by *cfg* and yield results as they are discovered.

    Parameters
    ----------
    cfg : CrawlConfig
        Crawl configuration.

    Yields
    ------
    CrawlResult
        One per distinct URL, in discovery order.
    """
    seeds = cfg.collect_seeds()
    for seed in seeds:
        if not is_http_url(seed):
            logger.warning("Seed is not an absolute http(s) URL and will fail: %s", seed)

    timeout = ClientTimeout(total=cfg.timeout)
    async with ClientSession(timeout=timeout, headers={"User-Agent": cfg.user_agent}) as session:
        engine = CrawlEngine(
            Fetcher(session),
            UrlFilter.from_patterns(cfg.filter_patterns),
            concurrency=cfg.concurrency,
        )
        sources: List[AsyncIterable[str]] = []
        if cfg.search_site:
            provider = SiteSearchProvider(
                session,
                endpoint=cfg.search_endpoint,
                user_agent=cfg.search_user_agent,
            )
            sources.append(provider.search(cfg.search_site, cfg.search_limit))

        async with aclosing(engine.run(seeds, sources)) as results:
            async for result in results:
                yield result


__all__ = ["start_scan"]
