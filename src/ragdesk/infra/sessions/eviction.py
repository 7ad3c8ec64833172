"""Periodic sweep of expired sessions, plus the store's lifespan wiring.

``build_session_store`` is a lifespan dependency: it creates the store,
attaches it to ``app.state`` and runs a ``SessionEvictor`` for the life
of the application.  Requests reach the store via ``get_session_store``.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from datetime import timedelta
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from ragdesk.configs.config import AppConfig, get_app_config
from ragdesk.infra.lifespan import get_app
from ragdesk.infra.telemetry import ATTR_SESSION_EVICTED, SPAN_SESSION_EVICT, tracer

from .base import SessionStore
from .memory import InMemorySessionStore

logger = logging.getLogger(__name__)


class SessionEvictor:
    """Owns an ``asyncio.Task`` that calls ``cleanup_expired_sessions``."""

    def __init__(self, store: SessionStore, interval: timedelta) -> None:
        self._store = store
        self._interval = interval.total_seconds()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._interval <= 0:
            logger.info("Session eviction disabled.")
            return
        self._task = asyncio.create_task(self._loop(), name="session-evictor")
        logger.info("Session evictor started (interval=%ds)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Session evictor stopped.")

    def sweep(self) -> int:
        with tracer.start_as_current_span(SPAN_SESSION_EVICT) as span:
            removed = self._store.cleanup_expired_sessions()
            span.set_attribute(ATTR_SESSION_EVICTED, removed)
            return removed

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.sweep()
            except Exception:
                logger.exception("Session eviction sweep failed")


# ---------------------------------------------------------------------------
# Lifespan / request dependencies
# ---------------------------------------------------------------------------


async def build_session_store(
    app: Annotated[FastAPI, Depends(get_app)],
    config: Annotated[AppConfig, Depends(get_app_config)],
) -> AsyncGenerator[None, None]:
    """Create the session store and run its evictor until shutdown."""
    store = InMemorySessionStore(
        ttl=config.session.ttl,
        default_window_size=config.session.default_window_size,
    )
    evictor = SessionEvictor(store, config.session.eviction_interval)
    app.state.session_store = store
    app.state.session_evictor = evictor
    await evictor.start()
    yield
    await evictor.stop()


def get_session_store(request: Request) -> SessionStore:
    """Per-request dependency -- reads from ``app.state``."""
    return request.app.state.session_store
