"""Structured logger used across skills-mcp.

Log calls take a short event message and an optional ``data`` mapping with
context. Everything is written to stderr because stdout carries the MCP
protocol when the server runs over stdio.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from collections.abc import Mapping

_ROOT_LOGGER_NAME = "skills_mcp"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class Logger:
    """Thin wrapper over :mod:`logging` accepting structured ``data``."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._logger = logging.getLogger(name)

    @property
    def std_logger(self) -> logging.Logger:
        return self._logger

    def debug(self, message: str, *, data: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, data, **kwargs)

    def info(self, message: str, *, data: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self._log(logging.INFO, message, data, **kwargs)

    def warning(
        self, message: str, *, data: Mapping[str, Any] | None = None, **kwargs: Any
    ) -> None:
        self._log(logging.WARNING, message, data, **kwargs)

    def error(self, message: str, *, data: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, data, **kwargs)

    def _log(
        self,
        level: int,
        message: str,
        data: Mapping[str, Any] | None,
        *,
        exc_info: Any = None,
    ) -> None:
        if not self._logger.isEnabledFor(level):
            return
        context = dict(data) if data else {}
        text = f"{message} {_format_context(context)}" if context else message
        self._logger.log(level, text, exc_info=exc_info, extra={"data": context})


def _format_context(context: Mapping[str, Any]) -> str:
    try:
        return json.dumps(context, ensure_ascii=False, default=str, sort_keys=True)
    except (TypeError, ValueError):
        return str(dict(context))


def get_logger(name: str) -> Logger:
    return Logger(name)


def resolve_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    if not level:
        return logging.INFO
    return _LEVELS.get(level.strip().lower(), logging.INFO)


def configure_logging(level: str | int | None = "info", *, console: Console | None = None) -> None:
    """Route the package logger to a Rich handler on stderr.

    Calling this again replaces the previously installed handler.
    """
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, "_skills_mcp_handler", False):
            root.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
        markup=False,
    )
    handler._skills_mcp_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(resolve_level(level))
    root.propagate = False
