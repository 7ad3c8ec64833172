"""Per-turn interaction records for downstream analytics."""

import logging
from datetime import datetime
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from ragdesk.core.pipeline.models import UserProfile

logger = logging.getLogger(__name__)


class Interaction(BaseModel):
    """One answered question, as seen by analytics."""

    timestamp: datetime
    session_id: str
    question: str
    answer: str
    sources: list[str] = Field(default_factory=list)
    response_time_ms: int
    needs_human_assistance: bool
    category: str
    relevance_score: float
    user_profile: UserProfile | None = None


@runtime_checkable
class InteractionSink(Protocol):
    """Destination for ``Interaction`` records.

    Implementations may raise; the chat service logs and drops the error so
    analytics never affect the response.
    """

    async def record(self, interaction: Interaction) -> None: ...


class LoggingInteractionSink:
    """Emits each interaction as a structured log record."""

    def __init__(self, logger_name: str = "ragdesk.analytics") -> None:
        self._logger = logging.getLogger(logger_name)

    async def record(self, interaction: Interaction) -> None:
        self._logger.info(
            "interaction",
            extra={"interaction": interaction.model_dump(mode="json")},
        )
