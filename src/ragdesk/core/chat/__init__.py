"""Chat turns: the pipeline plus sessions, deadlines and analytics."""

from .analytics import Interaction, InteractionSink, LoggingInteractionSink
from .deps import get_chat_service, get_interaction_sink, get_orchestrator
from .service import ChatService, ChatTurn

__all__ = [
    "ChatService",
    "ChatTurn",
    "Interaction",
    "InteractionSink",
    "LoggingInteractionSink",
    "get_chat_service",
    "get_interaction_sink",
    "get_orchestrator",
]
