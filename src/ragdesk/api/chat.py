"""Chat API endpoint implementation."""

from fastapi import APIRouter

from .deps import APIConfigDep, ChatServiceDep, SessionConfigDep
from .exceptions import InputValidationError
from .models import ChatRequest, ChatResponse, ErrorResponse

router = APIRouter(prefix="/api/v1", tags=["chat"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


def check_window_size(window_size: int, max_window_size: int) -> None:
    if not 0 <= window_size <= max_window_size:
        raise InputValidationError(
            f"window_size must be between 0 and {max_window_size}"
        )


@router.post("/chat", responses=ERROR_RESPONSES)
async def chat(
    chat_request: ChatRequest,
    chat_service: ChatServiceDep,
    api_config: APIConfigDep,
    session_config: SessionConfigDep,
) -> ChatResponse:
    """Answer one question within a conversation session.

    A missing ``session_id`` starts a new session; the id to reuse is
    returned in the response.
    """
    if len(chat_request.prompt) > api_config.max_prompt_length:
        raise InputValidationError(
            f"Prompt must be at most {api_config.max_prompt_length} characters"
        )
    if chat_request.window_size is not None:
        check_window_size(chat_request.window_size, session_config.max_window_size)

    turn = await chat_service.chat(
        chat_request.prompt,
        chat_request.session_id,
        window_size=chat_request.window_size,
        user_profile=chat_request.user_info,
    )
    return ChatResponse(**turn.model_dump())
