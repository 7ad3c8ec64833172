"""FastAPI dependency factories for the chat service.

``get_orchestrator`` and ``get_chat_service`` are per-request ``Depends``
factories with an explicit parameter chain; long-lived collaborators
(session store, vector store) are read from ``app.state``.
"""

from typing import Annotated

from fastapi import Depends
from langchain_core.language_models import BaseLanguageModel
from langchain_core.vectorstores import VectorStore

from ragdesk.configs.config import AppConfig, get_app_config
from ragdesk.core.llm import get_llm
from ragdesk.core.pipeline.orchestrator import Orchestrator
from ragdesk.core.pipeline.prompt import PromptBuilder
from ragdesk.core.retrieval import get_vector_store
from ragdesk.infra.sessions import SessionStore, get_session_store

from .analytics import InteractionSink, LoggingInteractionSink
from .service import ChatService


def get_interaction_sink() -> InteractionSink:
    return LoggingInteractionSink()


def get_orchestrator(
    llm: Annotated[BaseLanguageModel, Depends(get_llm)],
    vector_store: Annotated[VectorStore, Depends(get_vector_store)],
    config: Annotated[AppConfig, Depends(get_app_config)],
) -> Orchestrator:
    return Orchestrator.build(
        llm=llm,
        vector_store=vector_store,
        prompts=PromptBuilder(config.prompt),
        rag_config=config.rag,
        validation_config=config.validation,
    )


def get_chat_service(
    orchestrator: Annotated[Orchestrator, Depends(get_orchestrator)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
    sink: Annotated[InteractionSink, Depends(get_interaction_sink)],
    config: Annotated[AppConfig, Depends(get_app_config)],
) -> ChatService:
    """Create a chat service per request.

    All dependencies are injected explicitly via ``Depends()``.
    """
    return ChatService(
        orchestrator,
        sessions,
        sink,
        request_timeout=config.api.request_timeout,
    )
