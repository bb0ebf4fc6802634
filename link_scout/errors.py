"""link_scout.errors: Exception taxonomy shared by the crawler, parser and search layers."""

from __future__ import annotations

from enum import Enum
from typing import Optional

__all__ = ["LinkScoutError", "FetchErrorKind", "FetchError", "ParseError", "SearchError"]


class LinkScoutError(Exception):
    """Base class for every error raised by LinkScout."""


class FetchErrorKind(str, Enum):
    NETWORK = "network"
    HTTP_STATUS = "http_status"
    DECODE = "decode"


class FetchError(LinkScoutError):
    """A single URL could not be fetched. Never fatal to a crawl."""

    def __init__(
        self,
        url: str,
        kind: FetchErrorKind,
        detail: str = "",
        status: Optional[int] = None,
    ) -> None:
        self.url = url
        self.kind = kind
        self.detail = detail
        self.status = status
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.kind is FetchErrorKind.HTTP_STATUS and self.status is not None:
            return f"{self.kind.value}: HTTP {self.status} for {self.url}"
        if self.detail:
            return f"{self.kind.value}: {self.detail} ({self.url})"
        return f"{self.kind.value}: {self.url}"


class ParseError(LinkScoutError):
    """Document could not be parsed; callers treat it as a page without links."""


class SearchError(LinkScoutError):
    """Search backend failure; truncates the search result sequence."""
