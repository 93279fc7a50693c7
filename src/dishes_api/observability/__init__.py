"""Observability components: logging and metrics."""

from dishes_api.observability.logging import (
    bind_context,
    clear_context,
    get_context,
    get_logger,
    logger,
    setup_logging,
)
from dishes_api.observability.metrics import setup_metrics


__all__ = [
    "bind_context",
    "clear_context",
    "get_context",
    "get_logger",
    "logger",
    "setup_logging",
    "setup_metrics",
]
