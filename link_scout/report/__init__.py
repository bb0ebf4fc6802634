# File: link_scout/report/__init__.py
"""link_scout.report: Line-oriented output of crawl results, used by the CLI and tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Optional, Union

import click

from link_scout.crawler.models import CrawlResult


class ResultWriter:
    """
    Writes one line per result: the bare URL, or a JSON object with ``--json``.
    Output goes to *path* (parent directories are created) or to stdout.
    Every line is flushed immediately so the stream can be consumed live.
    """

    def __init__(self, path: Union[str, Path, None] = None, as_json: bool = False) -> None:
        self.path = Path(path) if path is not None else None
        self.as_json = as_json
        self.count = 0
        self._fh: Optional[IO[str]] = None

    def __enter__(self) -> ResultWriter:
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = self.path.open("w", encoding="utf-8")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def format(self, result: CrawlResult) -> str:
        if self.as_json:
            return json.dumps(result.to_dict(), ensure_ascii=False)
        return result.url

    def write(self, result: CrawlResult) -> None:
        line = self.format(result)
        if self._fh is not None:
            self._fh.write(line + "\n")
            self._fh.flush()
        else:
            click.echo(line)
        self.count += 1


__all__ = ["ResultWriter"]
