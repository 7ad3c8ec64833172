"""Session settings endpoints."""

from fastapi import APIRouter

from .chat import ERROR_RESPONSES, check_window_size
from .deps import SessionConfigDep, SessionStoreDep
from .models import WindowSizeResponse, WindowSizeUpdate

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


@router.get("/{session_id}/window")
async def get_window_size(
    session_id: str, sessions: SessionStoreDep
) -> WindowSizeResponse:
    return WindowSizeResponse(
        session_id=session_id,
        window_size=sessions.get_conversation_window_size(session_id),
    )


@router.put("/{session_id}/window", responses=ERROR_RESPONSES)
async def set_window_size(
    session_id: str,
    update: WindowSizeUpdate,
    sessions: SessionStoreDep,
    session_config: SessionConfigDep,
) -> WindowSizeResponse:
    check_window_size(update.window_size, session_config.max_window_size)
    sessions.set_conversation_window_size(session_id, update.window_size)
    return WindowSizeResponse(session_id=session_id, window_size=update.window_size)
