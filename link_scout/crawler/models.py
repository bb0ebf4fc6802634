"""
Data models for the LinkScout crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from link_scout.errors import FetchError

_HTML_TYPES = ("text/html", "application/xhtml+xml")


@dataclass(slots=True)
class PageData:
    """Holds the final URL, decoded body and Content-Type of a fetched page."""

    url: str
    content: str
    content_type: str = ""

    @property
    def is_html(self) -> bool:
        # servers that omit Content-Type are treated as serving HTML
        mime = self.content_type.split(";", 1)[0].strip().lower()
        return not mime or mime in _HTML_TYPES


@dataclass(frozen=True, slots=True)
class CrawlResult:
    """One discovered URL as emitted by the crawl engine."""

    url: str
    expanded: bool = False
    error: Optional[FetchError] = None
    links_found: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "expanded": self.expanded,
            "error": str(self.error) if self.error else None,
        }


@dataclass(slots=True)
class CrawlStats:
    """Counters of one crawl run; failed fetches are tallied here as well as on results."""

    emitted: int = 0
    fetched: int = 0
    failed: int = 0
    expanded: int = 0
    links_offered: int = 0
    links_accepted: int = 0
    errors: list[FetchError] = field(default_factory=list)
