"""State threaded through the orchestrator and its public projection."""

from typing import TypedDict

from pydantic import BaseModel, Field

from .chunk import DocumentChunk
from .messages import Message

__all__ = ["PipelineInput", "PipelineResult", "PipelineState"]


class PipelineInput(TypedDict):
    """Initial state supplied by the caller."""

    question: str
    history: list[Message]
    session_id: str


class PipelineState(PipelineInput, total=False):
    """Typed state threaded through every stage.

    Each key is written once, by the stage that owns it.
    """

    category: str

    context: list[DocumentChunk]
    context_relevance: float
    clarification_needed: bool

    answer: str

    needs_refinement: bool
    needs_human_assistance: bool

    refined_answer: str

    final_answer: str


class PipelineResult(BaseModel):
    """Fields the caller consumes once the pipeline has finished."""

    category: str
    context: list[DocumentChunk] = Field(default_factory=list)
    context_relevance: float = 0.0
    answer: str = ""
    needs_refinement: bool = False
    needs_human_assistance: bool = False
    final_answer: str = ""

    @classmethod
    def from_state(cls, state: PipelineState) -> "PipelineResult":
        return cls(
            category=state["category"],
            context=list(state.get("context", [])),
            context_relevance=state.get("context_relevance", 0.0),
            answer=state.get("answer", ""),
            needs_refinement=state.get("needs_refinement", False),
            needs_human_assistance=state.get("needs_human_assistance", False),
            final_answer=state.get("final_answer", ""),
        )

    @property
    def sources(self) -> list[str]:
        return [chunk.source for chunk in self.context]
