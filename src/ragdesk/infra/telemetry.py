"""OpenTelemetry bootstrap -- tracing initialisation and helpers.

Configures a ``TracerProvider`` with an OTLP HTTP exporter when tracing is
enabled via ``TracingConfig``.  When disabled the module is a no-op and
``tracer`` hands out non-recording spans, so pipeline code can always
open spans unconditionally.

Usage::

    from ragdesk.infra.telemetry import SPAN_PIPELINE_STAGE, tracer

    with tracer.start_as_current_span(SPAN_PIPELINE_STAGE) as span:
        ...
"""

from __future__ import annotations

import logging

from opentelemetry import trace

from ragdesk.configs.system import TracingConfig

logger = logging.getLogger(__name__)

tracer = trace.get_tracer("ragdesk")

# ---------------------------------------------------------------------------
# Span names
# ---------------------------------------------------------------------------

SPAN_PIPELINE = "pipeline.invoke"
SPAN_PIPELINE_STAGE = "pipeline.stage"
SPAN_RETRIEVE_SEARCH = "retrieve.search"
SPAN_SESSION_EVICT = "session.evict"

# ---------------------------------------------------------------------------
# Span attribute keys
# ---------------------------------------------------------------------------

ATTR_PIPELINE_SESSION_ID = "pipeline.session_id"
ATTR_PIPELINE_QUESTION_LEN = "pipeline.question_len"
ATTR_PIPELINE_HISTORY_LEN = "pipeline.history_len"
ATTR_PIPELINE_STAGE = "pipeline.stage"
ATTR_PIPELINE_CATEGORY = "pipeline.category"
ATTR_PIPELINE_REFINED = "pipeline.refined"
ATTR_PIPELINE_HANDOFF = "pipeline.handoff"

ATTR_RETRIEVE_TOP_K = "retrieve.top_k"
ATTR_RETRIEVE_CANDIDATES = "retrieve.candidates"
ATTR_RETRIEVE_SELECTED = "retrieve.selected"
ATTR_RETRIEVE_RELEVANCE = "retrieve.relevance"
ATTR_RETRIEVE_FAILED = "retrieve.failed"

ATTR_SESSION_EVICTED = "session.evicted"


def init_telemetry(
    app: object | None = None,
    settings: TracingConfig | None = None,
) -> None:
    """Initialise the OTEL ``TracerProvider`` and FastAPI instrumentation.

    No-op when ``settings`` is ``None`` or tracing is disabled.
    """
    if settings is None or not settings.enabled:
        logger.info("OpenTelemetry tracing disabled.")
        return

    if not settings.endpoint:
        logger.warning(
            "Tracing enabled but no endpoint configured; skipping OpenTelemetry setup."
        )
        return

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter,
    )
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

    resource = Resource.create({"service.name": settings.service_name})
    sampler = ParentBased(root=TraceIdRatioBased(settings.sample_rate))
    provider = TracerProvider(resource=resource, sampler=sampler)
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.endpoint))
    )
    trace.set_tracer_provider(provider)

    if app is not None:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        FastAPIInstrumentor.instrument_app(
            app, excluded_urls=",".join(settings.excluded_urls)
        )

    logger.info(
        "OpenTelemetry tracing initialised (service=%s).", settings.service_name
    )

