# File: tests/conftest.py
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing
from typing import Dict, List, Union

import pytest
import pytest_asyncio
from aiohttp import ClientSession, ClientTimeout, web

from link_scout.crawler.models import CrawlResult, PageData
from link_scout.errors import FetchError, FetchErrorKind

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]
Route = Union[str, Handler]


def html_page(*hrefs: str) -> str:
    """Build a minimal HTML page linking to *hrefs*."""
    links = "".join(f'<a href="{href}">{href}</a>' for href in hrefs)
    return f"<html><body>{links}</body></html>"


def _static(body: str) -> Handler:
    async def handler(_):
        return web.Response(text=body, content_type="text/html")

    return handler


@pytest_asyncio.fixture
async def serve_site() -> AsyncIterator[Callable[[Dict[str, Route]], Awaitable[str]]]:
    """
    Factory fixture: ``base = await serve_site({"/": "<html>..", "/slow": handler})``.
    Strings are served as text/html; callables are used as aiohttp handlers.
    Every started server is cleaned up after the test.
    """
    runners: List[web.AppRunner] = []

    async def _start(routes: Dict[str, Route]) -> str:
        app = web.Application()
        for path, route in routes.items():
            app.router.add_get(path, _static(route) if isinstance(route, str) else route)
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "127.0.0.1", 0)
        await site.start()
        runners.append(runner)
        host, port = runner.addresses[0][:2]
        return f"http://{host}:{port}"

    yield _start
    for runner in runners:
        await runner.cleanup()


@pytest_asyncio.fixture
async def session() -> AsyncIterator[ClientSession]:
    async with ClientSession(timeout=ClientTimeout(total=2.0)) as s:
        yield s


class FakeFetcher:
    """
    In-memory stand-in for :class:`link_scout.crawler.Fetcher`.

    *pages* maps normalized URLs to HTML; a callable computes the HTML for any
    URL (return None for a 404). Every call is recorded in :attr:`calls`.
    """

    def __init__(self, pages, delay: float = 0.0, content_type: str = "text/html") -> None:
        self.pages = pages
        self.delay = delay
        self.content_type = content_type
        self.calls: List[str] = []

    async def fetch(self, url: str) -> PageData:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        body = self.pages(url) if callable(self.pages) else self.pages.get(url)
        if body is None:
            raise FetchError(url, FetchErrorKind.HTTP_STATUS, "Not Found", status=404)
        return PageData(url, body, self.content_type)


async def collect(stream: AsyncIterator[CrawlResult]) -> List[CrawlResult]:
    """Drain a crawl stream, closing it properly."""
    async with aclosing(stream) as results:
        return [result async for result in results]


@pytest.fixture()
def seed_file(tmp_path):
    path = tmp_path / "seeds.txt"
    path.write_text("https://example.com/\n\n  https://example.org/docs  \n\n", encoding="utf-8")
    return path


class FakeProcess:
    """Stands in for an ``asyncio.subprocess.Process`` running wget."""

    def __init__(self, returncode: int = 0, hang: bool = False) -> None:
        self._exit_code = returncode
        self.returncode = None
        self.hang = hang
        self.killed = False

    async def communicate(self):
        if self.hang:
            await asyncio.Event().wait()
        self.returncode = self._exit_code
        return b"", b"" if self._exit_code == 0 else b"wget: unable to resolve host address"

    def kill(self) -> None:
        self.killed = True


@pytest.fixture()
def fake_wget(monkeypatch):
    """
    Replace ``asyncio.create_subprocess_exec``; every launch is recorded as
    ``(argv, cwd, process)``. URLs ending in ``/broken`` exit with status 4,
    URLs ending in ``/hang`` never finish.
    """
    launches = []

    async def fake_exec(program, *args, **kwargs):
        url = args[-1]
        process = FakeProcess(4 if url.endswith("/broken") else 0, hang=url.endswith("/hang"))
        launches.append(((program, *args), kwargs.get("cwd"), process))
        return process

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)
    return launches
