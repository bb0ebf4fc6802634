"""link_scout.crawler: frontier, fetcher, link extraction, filter and the crawl engine."""

from .engine import CrawlEngine
from .fetcher import Fetcher
from .frontier import Frontier, drain_into
from .link_extractor import extract_links, normalize_url
from .models import CrawlResult, CrawlStats, PageData
from .url_filter import UrlFilter

__all__ = [
    "CrawlEngine",
    "CrawlResult",
    "CrawlStats",
    "Fetcher",
    "Frontier",
    "PageData",
    "UrlFilter",
    "drain_into",
    "extract_links",
    "normalize_url",
]
