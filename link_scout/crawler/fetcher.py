# link_scout/crawler/fetcher.py
"""
Fetcher module: retrieves page bodies and maps every failure to a FetchError.
"""
from __future__ import annotations

import asyncio

from aiohttp import ClientError, ClientSession

from link_scout.crawler.models import PageData
from link_scout.errors import FetchError, FetchErrorKind

__all__ = ["Fetcher"]


class Fetcher:
    """HTTP fetching over a borrowed session. No retries: a failure is final for the URL."""

    def __init__(self, session: ClientSession, default_charset: str = "utf-8") -> None:
        self.session = session
        self.default_charset = default_charset

    async def fetch(self, url: str) -> PageData:
        """
        Fetch *url* and return its decoded body.

        Raises FetchError of kind NETWORK (connection, invalid URL, timeout),
        HTTP_STATUS (non-2xx final status) or DECODE (undecodable body).
        """
        try:
            async with self.session.get(url, raise_for_status=False) as resp:
                if not 200 <= resp.status < 300:
                    raise FetchError(url, FetchErrorKind.HTTP_STATUS, resp.reason or "", status=resp.status)
                body = await resp.read()
                charset = resp.charset or self.default_charset
                content_type = resp.headers.get("Content-Type", "")
                final_url = str(resp.url)
        except asyncio.TimeoutError as exc:
            raise FetchError(url, FetchErrorKind.NETWORK, "timeout") from exc
        except ClientError as exc:
            raise FetchError(url, FetchErrorKind.NETWORK, str(exc) or type(exc).__name__) from exc

        try:
            text = body.decode(charset)
        except (UnicodeDecodeError, LookupError) as exc:
            raise FetchError(url, FetchErrorKind.DECODE, str(exc)) from exc
        return PageData(final_url, text, content_type)
