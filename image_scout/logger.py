"""Logging setup for ImageScout.

All modules log through the ``"ImageScout"`` logger or one of its children
(:func:`get_logger`). Output goes to stdout and, if asked, to a rotating log
file. The CLI calls :func:`configure` once ``--log-level`` / ``--log-file``
are known; until then the defaults set up at import time apply.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

__all__ = ["logger", "configure", "init_logging", "get_logger"]

_ROOT_NAME: Final[str] = "ImageScout"
_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_ROTATE_BYTES: Final[int] = 5 * 1024 * 1024
_ROTATE_KEEP: Final[int] = 3


def _with_format(handler: logging.Handler, fmt: str) -> logging.Handler:
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def get_logger(name: str | None = None) -> logging.Logger:
    """``ImageScout`` itself, or ``ImageScout.<name>`` for a module logger."""
    return logging.getLogger(f"{_ROOT_NAME}.{name}" if name else _ROOT_NAME)


def configure(
    *,
    level: Union[int, str] = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Set the level and handlers of the ``ImageScout`` logger.

    With *replace_handlers* the current handlers are closed and dropped
    first; otherwise the new ones are added next to them. Records do not
    propagate to the root logger.
    """
    root = get_logger()
    root.setLevel(level)

    if replace_handlers:
        for old in list(root.handlers):
            root.removeHandler(old)
            old.close()

    root.addHandler(_with_format(logging.StreamHandler(sys.stdout), log_format))
    if log_file is not None:
        rotating = RotatingFileHandler(
            str(log_file), maxBytes=_ROTATE_BYTES, backupCount=_ROTATE_KEEP, encoding="utf-8"
        )
        root.addHandler(_with_format(rotating, log_format))

    root.propagate = False
    return root


def init_logging(level: Union[int, str] = "INFO", log_file: str | Path | None = None) -> logging.Logger:
    return configure(level=level, log_file=log_file)


logger: logging.Logger = init_logging()
