"""
Expansion filter: decides whether the children of a URL are explored.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

__all__ = ["UrlFilter"]


@dataclass(frozen=True, slots=True)
class UrlFilter:
    """
    Case-sensitive substring filter; patterns are ORed together.

    With no (non-empty) pattern configured nothing is expanded, so a crawl
    never runs away across the web by default.
    """

    patterns: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "patterns", tuple(p for p in self.patterns if p))

    @classmethod
    def from_patterns(cls, patterns: Optional[Iterable[str]]) -> UrlFilter:
        return cls(tuple(patterns or ()))

    def should_expand(self, url: str) -> bool:
        return any(pattern in url for pattern in self.patterns)

    __call__ = should_expand
