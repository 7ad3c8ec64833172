"""FastAPI application entry point."""

from typing import Annotated, AsyncGenerator

from fastapi import Depends, FastAPI

from ragdesk.api.chat import router as chat_router
from ragdesk.api.exceptions import register_exception_handlers
from ragdesk.api.sessions import router as sessions_router
from ragdesk.configs.config import AppConfig, get_app_config
from ragdesk.core.chat.metrics import instrument_metrics
from ragdesk.core.retrieval import build_vector_store
from ragdesk.infra.lifespan import inject
from ragdesk.infra.logging import setup_logging
from ragdesk.infra.sessions import build_session_store
from ragdesk.infra.telemetry import init_telemetry


@inject
async def lifespan(
    app: FastAPI,
    _sessions: Annotated[None, Depends(build_session_store)],
    _vector_store: Annotated[None, Depends(build_vector_store)],
) -> AsyncGenerator[None, None]:
    """Long-lived resources are built by the dependencies above."""
    yield


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Middleware and exception handlers are attached here, before the first
    request; lifespan dependencies only build resources.
    """
    config = config or get_app_config()
    setup_logging(config.logging)

    app = FastAPI(
        title="ragdesk",
        description="Retrieval-augmented customer support assistant",
        version="0.1.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)
    init_telemetry(app, config.tracing)
    instrument_metrics(app, config.tracing)

    app.include_router(chat_router)
    app.include_router(sessions_router)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
