# link_scout/crawler/link_extractor.py
"""
Link extraction and URL normalization utilities for LinkScout.
"""
from __future__ import annotations

from typing import List
from urllib.parse import SplitResult, urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import Tag

from link_scout.errors import ParseError
from link_scout.logger import logger
from link_scout.utils import remove_duplicates

__all__ = ["extract_links", "normalize_url"]

_DEFAULT_PORTS = {"http": 80, "https": 443}


def _normalize_netloc(parts: SplitResult, scheme: str) -> str:
    userinfo, at, _ = parts.netloc.rpartition("@")
    try:
        port = parts.port
    except ValueError:
        return parts.netloc
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    if port is not None and _DEFAULT_PORTS.get(scheme) != port:
        host = f"{host}:{port}"
    return f"{userinfo}{at}{host}"


def normalize_url(url: str) -> str:
    """
    Normalize URL by lowercasing scheme and host, dropping the default port
    and the fragment. An empty path becomes "/"; user info and the query are
    kept verbatim.
    """
    parts = urlsplit(url.strip())
    scheme = parts.scheme.lower()
    netloc = _normalize_netloc(parts, scheme)
    path = parts.path or ("/" if netloc else "")
    return urlunsplit((scheme, netloc, path, parts.query, ""))


def _parse(content: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(content, "html.parser")
    except (ParserRejectedMarkup, AssertionError, ValueError) as exc:
        raise ParseError(str(exc)) from exc


def extract_links(base_url: str, content: str) -> List[str]:
    """
    Extract absolute HTTP(S) links from an HTML document.

    Relative references are resolved against ``<base href>`` when present,
    otherwise against *base_url*. Fragment-only links and non-HTTP schemes
    (mailto:, javascript:, tel:, ...) are ignored. The result is normalized
    and deduplicated in order of first occurrence. Malformed documents yield
    an empty list.
    """
    try:
        soup = _parse(content)
    except ParseError as exc:
        logger.debug("Unparseable document at %s: %s", base_url, exc)
        return []

    base = base_url
    base_tag = soup.find("base", href=True)
    if isinstance(base_tag, Tag):
        base_href = base_tag.get("href")
        if isinstance(base_href, str) and base_href.strip():
            base = urljoin(base_url, base_href.strip())

    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw or raw.startswith("#"):
            continue
        try:
            absolute = urljoin(base, raw)
            parsed = urlsplit(absolute)
        except ValueError:
            # e.g. an unbalanced IPv6 bracket in the host
            continue
        if parsed.scheme.lower() in ("http", "https") and parsed.netloc:
            links.append(normalize_url(absolute))
    return remove_duplicates(links)
