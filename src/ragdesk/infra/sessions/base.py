"""Session store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime

from ragdesk.core.pipeline.models import Message, UserProfile


@dataclass
class Session:
    """One conversation: append-only history plus per-session settings."""

    history: list[Message]
    last_activity: datetime
    window_size: int | None = None
    user_profile: UserProfile | None = None


@dataclass
class SessionSnapshot:
    """What ``get_or_create_session`` hands back to callers.

    ``history`` is the live list owned by the store, not a copy.
    """

    session_id: str
    history: list[Message] = field(default_factory=list)
    user_profile: UserProfile | None = None


class SessionStore(ABC):
    """Per-session conversation history and context-window settings.

    Implementations never raise for unknown ids: a missing or expired
    session is recreated empty on access.  Concurrent turns on the same
    session are last-write-wins; no per-session serialisation is done.
    """

    @abstractmethod
    def get_or_create_session(
        self,
        session_id: str | None = None,
        user_profile: UserProfile | None = None,
    ) -> SessionSnapshot:
        """Return the session, minting an id or recreating it if needed."""

    @abstractmethod
    def add_message(
        self,
        session_id: str,
        message: Message,
        user_profile: UserProfile | None = None,
    ) -> None:
        """Append ``message`` (timestamped if needed) to the session history."""

    @abstractmethod
    def get_formatted_history(
        self, session_id: str, override_window: int | None = None
    ) -> list[Message]:
        """Most recent N messages, oldest first."""

    @abstractmethod
    def get_full_history(self, session_id: str) -> list[Message]:
        """Copy of the whole history, without windowing."""

    @abstractmethod
    def set_window_size(self, session_id: str, window_size: int) -> None:
        """Per-session window override; callers validate the bound."""

    @abstractmethod
    def get_window_size(self, session_id: str) -> int:
        """Window size in effect for ``session_id``."""

    @abstractmethod
    def update_user_profile(self, session_id: str, profile: UserProfile) -> None:
        """Overwrite the stored profile of an existing session."""

    @abstractmethod
    def cleanup_expired_sessions(self) -> int:
        """Drop expired sessions; returns how many were removed."""

    # Aliases matching the names callers of the chat API know.
    def set_conversation_window_size(self, session_id: str, window_size: int) -> None:
        self.set_window_size(session_id, window_size)

    def get_conversation_window_size(self, session_id: str) -> int:
        return self.get_window_size(session_id)
