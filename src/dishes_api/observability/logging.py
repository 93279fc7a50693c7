"""Logging configuration using Loguru.

This module provides:
- JSON lines for production, colourised text for development
- Request-scoped context (request id, method, path) via a ContextVar
- Interception of standard library logging (uvicorn, asyncpg)

Never pass token plaintext or passwords to a logger; log member ids and
token scopes instead.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

import orjson
from loguru import logger


if TYPE_CHECKING:
    from loguru import Record


_log_context: ContextVar[dict[str, Any] | None] = ContextVar(
    "log_context", default=None
)

_NOISY_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "asyncpg", "asyncio")


class InterceptHandler(logging.Handler):
    """Forward standard library log records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so Loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _json_format(record: Record) -> str:
    """Serialize a record to one JSON line stored under ``extra[serialized]``."""
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["extra"].get("name", record["name"]),
        "function": record["function"],
        "line": record["line"],
        **get_context(),
        **{k: v for k, v in record["extra"].items() if k != "serialized"},
    }
    exception = record["exception"]
    if exception:
        payload["exception"] = {
            "type": exception.type.__name__ if exception.type else None,
            "value": str(exception.value) if exception.value else None,
        }

    record["extra"]["serialized"] = orjson.dumps(payload, default=str).decode()
    return "{extra[serialized]}\n"


def _text_format(record: Record) -> str:
    """Human-readable format with the request context appended."""
    context = {**get_context(), **record["extra"]}
    context.pop("name", None)
    record["extra"]["context"] = (
        " | " + " ".join(f"{k}={v}" for k, v in context.items()) if context else ""
    )

    fmt = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"
        "{extra[context]} - <level>{message}</level>\n"
    )
    if record["exception"]:
        fmt += "{exception}\n"
    return fmt


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    *,
    is_development: bool = False,
) -> None:
    """Configure Loguru sinks and route stdlib logging through them.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        log_format: "json" or "text".
        is_development: Force the text format with diagnose enabled.
    """
    logger.remove()

    if log_format == "json" and not is_development:
        logger.add(
            sys.stdout,
            format=_json_format,
            level=log_level.upper(),
            colorize=False,
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stdout,
            format=_text_format,
            level=log_level.upper(),
            colorize=True,
            backtrace=True,
            diagnose=is_development,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """Return the Loguru logger bound to ``name`` (typically ``__name__``)."""
    return logger.bind(name=name)


def bind_context(**kwargs: Any) -> None:
    """Add key/value pairs to the logging context of the current request.

    The dict created by :func:`clear_context` is updated in place, so keys
    bound inside an endpoint are visible to middleware that awaited it from
    a parent task.
    """
    context = _log_context.get()
    if context is None:
        _log_context.set(dict(kwargs))
    else:
        context.update(kwargs)


def clear_context() -> None:
    """Drop all context; called at the start of each request."""
    _log_context.set({})


def get_context() -> dict[str, Any]:
    """Return a copy of the current logging context."""
    return dict(_log_context.get() or {})


__all__ = [
    "InterceptHandler",
    "bind_context",
    "clear_context",
    "get_context",
    "get_logger",
    "logger",
    "setup_logging",
]
