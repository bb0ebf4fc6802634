"""
Site-restricted web search used as an additional seed source.

:meth:`SiteSearchProvider.search` is the single pull-based implementation;
:meth:`SiteSearchProvider.feed` pushes the same sequence into a sink.
"""
from __future__ import annotations

import asyncio
import re
from typing import AsyncIterator, Awaitable, Callable, List
from urllib.parse import unquote

from aiohttp import ClientError, ClientSession
from bs4 import BeautifulSoup

from link_scout.crawler.frontier import drain_into
from link_scout.errors import SearchError
from link_scout.logger import logger

__all__ = ["SiteSearchProvider", "DEFAULT_ENDPOINT", "DEFAULT_SEARCH_USER_AGENT"]

DEFAULT_ENDPOINT = "https://www.google.com/search"
DEFAULT_SEARCH_USER_AGENT = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"

_RESULT_HREF = re.compile(r"/url\?q=(.*?)&sa=")


def parse_result_links(html: str) -> List[str]:
    """Extract result URLs from the ``/url?q=<target>&sa=...`` anchors of a result page."""
    soup = BeautifulSoup(html, "html.parser")
    found: List[str] = []
    for tag in soup.find_all("a", href=True):
        href = tag.get("href")
        if not isinstance(href, str):
            continue
        match = _RESULT_HREF.search(href)
        if match:
            found.append(unquote(match.group(1)))
    return found


class SiteSearchProvider:
    """Pages through a search backend with a ``site:`` query."""

    def __init__(
        self,
        session: ClientSession,
        endpoint: str = DEFAULT_ENDPOINT,
        user_agent: str = DEFAULT_SEARCH_USER_AGENT,
        page_size: int = 10,
    ) -> None:
        self.session = session
        self.endpoint = endpoint
        self.user_agent = user_agent
        self.page_size = page_size

    async def _fetch_page(self, site: str, start: int) -> List[str]:
        params = {"q": f"site:{site}", "start": str(start)}
        try:
            async with self.session.get(
                self.endpoint, params=params, headers={"User-Agent": self.user_agent}
            ) as resp:
                if not 200 <= resp.status < 300:
                    raise SearchError(f"search backend answered HTTP {resp.status}")
                body = await resp.text()
        except asyncio.TimeoutError as exc:
            raise SearchError("search backend timed out") from exc
        except (ClientError, UnicodeDecodeError) as exc:
            raise SearchError(f"search request failed: {exc}") from exc
        return parse_result_links(body)

    async def search(self, site: str, limit: int) -> AsyncIterator[str]:
        """
        Yield at most *limit* result URLs for ``site:<site>`` in backend order.

        Ends at *limit*, at the first empty result page, or on a backend
        failure (logged, never raised).
        """
        fetched = 0
        start = 0
        while fetched < limit:
            try:
                urls = await self._fetch_page(site, start)
            except SearchError as exc:
                logger.warning("Site search for %s stopped after %d result(s): %s", site, fetched, exc)
                return
            if not urls:
                break
            for url in urls:
                yield url
                fetched += 1
                if fetched >= limit:
                    break
            start += self.page_size
        logger.info("Site search for %s returned %d result(s)", site, fetched)

    async def feed(self, site: str, limit: int, sink: Callable[[str], Awaitable[object]]) -> int:
        """Push variant of :meth:`search`: sends each result to *sink*; returns how many were accepted."""
        return await drain_into(self.search(site, limit), sink)
