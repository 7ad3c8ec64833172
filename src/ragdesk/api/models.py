"""Pydantic models for the chat API."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from ragdesk.core.pipeline.models import UserProfile

STATUS_SUCCESS = "Success"
STATUS_ERROR = "Error"

# Error codes returned in ``ErrorResponse.code``
CODE_INPUT_VALIDATION = "input_validation"
CODE_TIMEOUT = "timeout"
CODE_MODEL_ERROR = "model_error"
CODE_SERVER_ERROR = "server_error"


class ChatRequest(BaseModel):
    """Request model for the chat endpoint."""

    prompt: str = Field(description="User question; surrounding whitespace is trimmed")
    session_id: str | None = Field(
        default=None, description="Existing session id; a new one is minted if absent"
    )
    window_size: int | None = Field(
        default=None,
        ge=0,
        description="History messages to use for this and later turns",
    )
    user_info: UserProfile | None = Field(
        default=None, description="Optional contact details for the session"
    )

    @field_validator("prompt")
    @classmethod
    def _strip_prompt(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Prompt must not be empty")
        return value


class ChatResponse(BaseModel):
    status: Literal["Success"] = STATUS_SUCCESS
    session_id: str
    message: str
    needs_human_assistance: bool = False
    category: str
    context_relevance: float = 0.0
    sources: list[str] = Field(default_factory=list)


class WindowSizeUpdate(BaseModel):
    window_size: int = Field(ge=0, description="History messages to keep in context")


class WindowSizeResponse(BaseModel):
    status: Literal["Success"] = STATUS_SUCCESS
    session_id: str
    window_size: int


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    status: Literal["Error"] = STATUS_ERROR
    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="User-facing error message")
