"""Pipeline exceptions.

Retrieval failures never surface here; the retriever degrades to an empty
context instead. LLM failures propagate out of the orchestrator untouched
and are classified by the chat service.
"""


class PipelineError(Exception):
    """Base class for pipeline errors."""


class StateTransitionError(PipelineError):
    """A stage rewrote a field owned by an earlier stage, or routing failed."""


class PipelineTimeout(PipelineError):
    """The whole invocation exceeded the caller's deadline."""

    def __init__(self, message: str, *, timeout_seconds: float) -> None:
        super().__init__(message)
        self.timeout_seconds = timeout_seconds


class ModelError(PipelineError):
    """The LLM provider failed while generating or refining an answer."""
