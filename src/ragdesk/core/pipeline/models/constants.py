"""Stage names, state keys and message roles."""

from enum import Enum

__all__ = [
    "DocumentCategory",
    "Stage",
    "KEY_QUESTION",
    "KEY_HISTORY",
    "KEY_SESSION_ID",
    "KEY_CATEGORY",
    "KEY_CONTEXT",
    "KEY_CONTEXT_RELEVANCE",
    "KEY_CLARIFICATION_NEEDED",
    "KEY_ANSWER",
    "KEY_NEEDS_REFINEMENT",
    "KEY_NEEDS_HUMAN_ASSISTANCE",
    "KEY_REFINED_ANSWER",
    "KEY_FINAL_ANSWER",
    "INPUT_KEYS",
    "ROLE_HUMAN",
    "ROLE_ASSISTANT",
    "ROLE_SYSTEM",
]


class DocumentCategory(str, Enum):
    """Coarse topic categories; declaration order breaks scoring ties."""

    TRANSPORT = "Transport"
    COMMODITIES = "Commodities"
    CHEMICALS = "Chemicals"
    SERVICES = "Services"
    GENERAL = "General"


class Stage(str, Enum):
    """Pipeline stages in execution order."""

    CATEGORIZE = "categorize"
    RETRIEVE = "retrieve"
    GENERATE = "generate"
    VALIDATE = "validate"
    REFINE = "refine"
    HANDLE_HUMAN_ASSISTANCE = "handle_human_assistance"


# ---------------------------------------------------------------------------
# PipelineState keys (avoid magic strings)
# ---------------------------------------------------------------------------

KEY_QUESTION = "question"
KEY_HISTORY = "history"
KEY_SESSION_ID = "session_id"
KEY_CATEGORY = "category"
KEY_CONTEXT = "context"
KEY_CONTEXT_RELEVANCE = "context_relevance"
KEY_CLARIFICATION_NEEDED = "clarification_needed"
KEY_ANSWER = "answer"
KEY_NEEDS_REFINEMENT = "needs_refinement"
KEY_NEEDS_HUMAN_ASSISTANCE = "needs_human_assistance"
KEY_REFINED_ANSWER = "refined_answer"
KEY_FINAL_ANSWER = "final_answer"

INPUT_KEYS = frozenset({KEY_QUESTION, KEY_HISTORY, KEY_SESSION_ID})

# ---------------------------------------------------------------------------
# Message roles
# ---------------------------------------------------------------------------

ROLE_HUMAN = "human"
ROLE_ASSISTANT = "assistant"
ROLE_SYSTEM = "system"
