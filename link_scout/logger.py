"""Logging setup for **LinkScout**.

Everything logs through one named logger, ``LinkScout``. Records go to
*stderr*, leaving stdout to the stream of discovered URLs, and optionally to
a size-rotated log file as well::

    from link_scout.logger import logger
    logger.warning("Skipped %s", error)

The CLI calls :func:`init_logging` once its options are parsed; library code
only imports :data:`logger`.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "LinkScout"

#: rotation policy of the optional log file
MAX_LOG_BYTES: Final[int] = 5 * 1024 * 1024
LOG_BACKUPS: Final[int] = 3

LevelType = Union[int, str]


def _build_handlers(log_file: Path | str | None, fmt: str) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(str(log_file), maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: LevelType = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Attach fresh handlers to the ``LinkScout`` logger and set its level.

    With *replace_handlers* the previous handlers are detached and closed,
    which releases an earlier log file.
    """
    project_logger = logging.getLogger(LOGGER_NAME)
    project_logger.setLevel(level)

    if replace_handlers:
        for old in project_logger.handlers[:]:
            project_logger.removeHandler(old)
            old.close()

    for handler in _build_handlers(log_file, log_format):
        project_logger.addHandler(handler)

    project_logger.propagate = False
    return project_logger


def init_logging(
    level: LevelType = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    return configure(level=level, log_file=log_file, log_format=log_format)


logger: logging.Logger = init_logging()

__all__ = ["DEFAULT_FORMAT", "LOGGER_NAME", "configure", "init_logging", "logger"]
