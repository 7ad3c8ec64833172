"""Prometheus metrics for the chat service, plus HTTP instrumentation.

HTTP request metrics come from ``prometheus-fastapi-instrumentator``;
pipeline internals are counted in ``ragdesk.core.pipeline.metrics``.
"""

import logging

from fastapi import FastAPI
from prometheus_client import Counter, Histogram
from prometheus_fastapi_instrumentator import Instrumentator

from ragdesk.configs.system import TracingConfig

logger = logging.getLogger(__name__)

CHAT_TURNS_TOTAL = Counter(
    "ragdesk_chat_turns_total",
    "Chat turns handled, by outcome",
    ["status"],  # "ok" | "timeout" | "model_error" | "error"
)

CHAT_TURN_DURATION_SECONDS = Histogram(
    "ragdesk_chat_turn_duration_seconds",
    "Duration of a chat turn including session bookkeeping",
    buckets=(0.25, 0.5, 1, 2, 5, 10, 15, 25, 60),
)

ANALYTICS_FAILURES_TOTAL = Counter(
    "ragdesk_analytics_failures_total",
    "Interaction records the analytics sink failed to store",
)


def instrument_metrics(app: FastAPI, tracing: TracingConfig) -> None:
    """Instrument HTTP handlers and expose ``/metrics``.

    Adds middleware, so it must run before the application first serves.
    """
    Instrumentator(
        should_instrument_requests_inprogress=True,
        excluded_handlers=tracing.excluded_urls,
    ).instrument(app).expose(app, endpoint="/metrics")

    logger.info("Prometheus metrics initialised")
