"""Prometheus metrics instrumentation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_fastapi_instrumentator import Instrumentator, metrics

from dishes_api.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import FastAPI

    from dishes_api.core.config import Settings

logger = get_logger(__name__)

METRIC_NAMESPACE = "dishes_api"


def setup_metrics(app: FastAPI, settings: Settings) -> Instrumentator | None:
    """Instrument HTTP handlers and expose ``{prefix}/metrics``.

    Returns None when metrics are disabled in settings.
    """
    if not settings.observability.metrics.enabled:
        logger.info("Metrics collection disabled")
        return None

    prefix = settings.api.v1_prefix
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=[
            f"{prefix}/health",
            f"{prefix}/ready",
            f"{prefix}/metrics",
        ],
    )
    instrumentator.add(
        metrics.default(
            metric_namespace=METRIC_NAMESPACE,
            metric_subsystem="http",
        )
    )
    instrumentator.instrument(app)

    endpoint = f"{prefix}/metrics"
    instrumentator.expose(app, endpoint=endpoint, tags=["monitoring"])
    logger.info("Prometheus metrics configured", endpoint=endpoint)
    return instrumentator


__all__ = ["METRIC_NAMESPACE", "setup_metrics"]
