"""Structured logging for chat turns.

``setup_logging`` installs one stdout handler on the root logger (and the
uvicorn loggers). Every record it emits carries:

* ``session_id`` and ``stage`` -- bound with :func:`log_context` by the
  chat service and the pipeline driver, so all lines of one turn (retrieval
  warnings, LLM client errors, stage timings) can be grouped without
  threading ids through every call.
* ``trace_id`` / ``span_id`` -- from the current OpenTelemetry span.

Records are JSON lines by default (python-json-logger) or uvicorn's
coloured format when ``LoggingConfig.json_output`` is off.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from opentelemetry import trace

from ragdesk.configs.system import LoggingConfig

# Record attributes owned by this module, all defaulting to "".
CONTEXT_FIELDS = ("session_id", "stage")
TRACE_FIELDS = ("trace_id", "span_id")

_log_context: ContextVar[dict[str, str]] = ContextVar("ragdesk_log_context")

_JSON_FORMAT = " ".join(
    f"%({field})s"
    for field in ("asctime", "levelname", "name", "message")
    + CONTEXT_FIELDS
    + TRACE_FIELDS
)
_DEV_FORMAT = (
    "%(levelprefix)s %(asctime)s %(name)s [%(session_id)s %(stage)s]  %(message)s"
)
_DEV_DATEFMT = "%H:%M:%S"

_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "opentelemetry")


@contextmanager
def log_context(**fields: str) -> Iterator[None]:
    """Attach ``fields`` to every record logged inside the block.

    Nested blocks add to (and may shadow) the outer fields. Tasks created
    inside the block, such as ``asyncio.wait_for`` around the pipeline,
    inherit them.
    """
    token = _log_context.set({**_log_context.get({}), **fields})
    try:
        yield
    finally:
        _log_context.reset(token)


def current_log_context() -> dict[str, str]:
    return dict(_log_context.get({}))


class TurnContextFilter(logging.Filter):
    """Copies the bound turn fields and the OTEL span ids onto records."""

    def filter(self, record: logging.LogRecord) -> bool:
        bound = _log_context.get({})
        for field in CONTEXT_FIELDS:
            setattr(record, field, bound.get(field, ""))

        ctx = trace.get_current_span().get_span_context()
        if ctx.is_valid:
            record.trace_id = format(ctx.trace_id, "032x")
            record.span_id = format(ctx.span_id, "016x")
        else:
            record.trace_id = record.span_id = ""
        return True


def _build_formatter(config: LoggingConfig) -> logging.Formatter:
    if config.json_output:
        from pythonjsonlogger.json import JsonFormatter

        return JsonFormatter(
            fmt=_JSON_FORMAT,
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "logger",
            },
            defaults=dict.fromkeys(CONTEXT_FIELDS + TRACE_FIELDS, ""),
        )

    from uvicorn.logging import DefaultFormatter

    return DefaultFormatter(fmt=_DEV_FORMAT, datefmt=_DEV_DATEFMT, use_colors=True)


def setup_logging(config: LoggingConfig | None = None) -> logging.Handler:
    """Route the root and uvicorn loggers through one annotated handler.

    Safe to call more than once; each call replaces the previous handler.
    """
    config = config or LoggingConfig()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(TurnContextFilter())
    handler.setFormatter(_build_formatter(config))

    root = logging.getLogger()
    root.setLevel(config.level.upper())
    root.handlers = [handler]

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [handler]
        uvicorn_logger.propagate = False

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return handler
