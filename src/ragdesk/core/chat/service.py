"""Chat turn handling around the RAG pipeline.

The pipeline owns branching; this layer owns everything a turn needs
around it: session lookup, the request deadline, classification of LLM
failures, persisting the exchange and reporting it to analytics.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import timedelta

from pydantic import BaseModel, Field

from ragdesk.core.pipeline.errors import ModelError, PipelineError, PipelineTimeout
from ragdesk.core.pipeline.models import (
    ROLE_ASSISTANT,
    ROLE_HUMAN,
    Message,
    PipelineResult,
    UserProfile,
    utcnow,
)
from ragdesk.core.pipeline.orchestrator import Orchestrator
from ragdesk.infra.logging import log_context
from ragdesk.infra.sessions import SessionStore

from .analytics import Interaction, InteractionSink
from .metrics import (
    ANALYTICS_FAILURES_TOTAL,
    CHAT_TURN_DURATION_SECONDS,
    CHAT_TURNS_TOTAL,
)

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = timedelta(seconds=25)


class ChatTurn(BaseModel):
    """Outcome of one successful chat turn."""

    session_id: str
    message: str
    needs_human_assistance: bool = False
    category: str
    context_relevance: float = 0.0
    sources: list[str] = Field(default_factory=list)


class ChatService:
    def __init__(
        self,
        orchestrator: Orchestrator,
        sessions: SessionStore,
        sink: InteractionSink | None = None,
        *,
        request_timeout: timedelta = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._orchestrator = orchestrator
        self._sessions = sessions
        self._sink = sink
        self._timeout = request_timeout.total_seconds()

    async def chat(
        self,
        prompt: str,
        session_id: str | None = None,
        *,
        window_size: int | None = None,
        user_profile: UserProfile | None = None,
    ) -> ChatTurn:
        """Answer ``prompt`` within the session, creating it if needed.

        ``window_size`` (already validated) is stored on the session before
        its history is read.

        Raises:
            PipelineTimeout: the pipeline missed the request deadline.
            ModelError: the LLM call failed.
        """
        start = time.monotonic()
        snapshot = self._sessions.get_or_create_session(session_id, user_profile)
        sid = snapshot.session_id
        if user_profile is not None:
            self._sessions.update_user_profile(sid, user_profile)
        if window_size is not None:
            self._sessions.set_conversation_window_size(sid, window_size)
        history = self._sessions.get_formatted_history(sid)

        try:
            result = await self._run_pipeline(prompt, history, sid)
        finally:
            CHAT_TURN_DURATION_SECONDS.observe(time.monotonic() - start)

        self._sessions.add_message(sid, Message(role=ROLE_HUMAN, content=prompt))
        self._sessions.add_message(
            sid, Message(role=ROLE_ASSISTANT, content=result.final_answer)
        )
        CHAT_TURNS_TOTAL.labels(status="ok").inc()

        elapsed_ms = int((time.monotonic() - start) * 1000)
        await self._record(
            Interaction(
                timestamp=utcnow(),
                session_id=sid,
                question=prompt,
                answer=result.final_answer,
                sources=result.sources,
                response_time_ms=elapsed_ms,
                needs_human_assistance=result.needs_human_assistance,
                category=result.category,
                relevance_score=result.context_relevance,
                user_profile=user_profile or snapshot.user_profile,
            )
        )

        return ChatTurn(
            session_id=sid,
            message=result.final_answer,
            needs_human_assistance=result.needs_human_assistance,
            category=result.category,
            context_relevance=result.context_relevance,
            sources=result.sources,
        )

    async def _run_pipeline(
        self, prompt: str, history: list[Message], session_id: str
    ) -> PipelineResult:
        # The wait_for task copies the bound context, so pipeline logs carry
        # the session id too.
        with log_context(session_id=session_id):
            try:
                state = await asyncio.wait_for(
                    self._orchestrator.invoke(prompt, history, session_id),
                    timeout=self._timeout,
                )
            except asyncio.TimeoutError as exc:
                CHAT_TURNS_TOTAL.labels(status="timeout").inc()
                logger.warning("Pipeline timed out after %.1fs", self._timeout)
                raise PipelineTimeout(
                    "The request took too long to process",
                    timeout_seconds=self._timeout,
                ) from exc
            except PipelineError:
                CHAT_TURNS_TOTAL.labels(status="error").inc()
                raise
            except Exception as exc:
                CHAT_TURNS_TOTAL.labels(status="model_error").inc()
                logger.error("Pipeline failed", exc_info=True)
                raise ModelError("The language model failed to respond") from exc
        return PipelineResult.from_state(state)

    async def _record(self, interaction: Interaction) -> None:
        if self._sink is None:
            return
        try:
            await self._sink.record(interaction)
        except Exception:
            ANALYTICS_FAILURES_TOTAL.inc()
            logger.warning("Failed to record interaction", exc_info=True)
