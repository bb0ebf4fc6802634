# File: link_scout/utils.py
"""link_scout.utils: Helpers for seed lists and URL collections."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence, Union
from urllib.parse import urlsplit

from link_scout.logger import logger

__all__: Sequence[str] = (
    "is_http_url",
    "read_url_list",
    "remove_duplicates",
)


def is_http_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme.lower() in ("http", "https") and bool(parts.netloc)


def read_url_list(path: Union[str, Path]) -> List[str]:
    """Reads a newline-delimited URL list; blank lines are ignored, entries are stripped."""
    p = Path(path).expanduser()
    if not p.is_file():
        logger.error("URL list not found: %s", p)
        raise FileNotFoundError(f"URL list file not found: {p}")
    urls = [line.strip() for line in p.read_text(encoding="utf-8").splitlines() if line.strip()]
    logger.debug("Loaded %d URLs from %s", len(urls), p)
    return urls


def remove_duplicates(urls: Iterable[str]) -> List[str]:
    """Removes duplicates while keeping first-occurrence order."""
    items = list(urls)
    unique = list(dict.fromkeys(items))
    removed = len(items) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
