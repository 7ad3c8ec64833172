"""Process-local session store backed by a plain dict."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from ragdesk.core.pipeline.models import Message, UserProfile, utcnow
from ragdesk.infra.id_utils import new_session_id

from .base import Session, SessionSnapshot, SessionStore

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)
DEFAULT_WINDOW_SIZE = 10

Clock = Callable[[], datetime]


class InMemorySessionStore(SessionStore):
    """Dict-backed store with lazy expiry.

    Expiry is checked on every access, so correctness never depends on
    ``cleanup_expired_sessions`` running; the sweep only reclaims memory.
    """

    def __init__(
        self,
        *,
        ttl: timedelta = DEFAULT_TTL,
        default_window_size: int = DEFAULT_WINDOW_SIZE,
        clock: Clock = utcnow,
        id_factory: Callable[[], str] = new_session_id,
    ) -> None:
        self._sessions: dict[str, Session] = {}
        self._ttl = ttl
        self._default_window_size = default_window_size
        self._clock = clock
        self._id_factory = id_factory

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    @property
    def default_window_size(self) -> int:
        return self._default_window_size

    def set_default_window_size(self, window_size: int) -> None:
        """Change the store-wide default; non-positive values are ignored."""
        if window_size > 0:
            self._default_window_size = window_size

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _is_expired(self, session: Session, now: datetime) -> bool:
        return now - session.last_activity > self._ttl

    def _ensure(
        self, session_id: str, user_profile: UserProfile | None
    ) -> Session:
        now = self._clock()
        session = self._sessions.get(session_id)
        if session is None or self._is_expired(session, now):
            if session is not None:
                logger.info("Session %s expired, recreating", session_id)
            session = Session(
                history=[],
                last_activity=now,
                window_size=self._default_window_size,
                user_profile=user_profile,
            )
            self._sessions[session_id] = session
            return session

        session.last_activity = now
        if user_profile is not None and session.user_profile is None:
            session.user_profile = user_profile
        return session

    def get_or_create_session(
        self,
        session_id: str | None = None,
        user_profile: UserProfile | None = None,
    ) -> SessionSnapshot:
        sid = session_id or self._id_factory()
        session = self._ensure(sid, user_profile)
        return SessionSnapshot(
            session_id=sid,
            history=session.history,
            user_profile=session.user_profile,
        )

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def add_message(
        self,
        session_id: str,
        message: Message,
        user_profile: UserProfile | None = None,
    ) -> None:
        session = self._ensure(session_id, user_profile)
        now = self._clock()
        session.history.append(message.stamped(now))
        session.last_activity = now
        if user_profile is not None:
            session.user_profile = user_profile

    def get_formatted_history(
        self, session_id: str, override_window: int | None = None
    ) -> list[Message]:
        session = self._ensure(session_id, None)
        if override_window is not None:
            window = override_window
        elif session.window_size is not None:
            window = session.window_size
        else:
            window = self._default_window_size
        if window <= 0:
            return []
        return list(session.history[-window:])

    def get_full_history(self, session_id: str) -> list[Message]:
        return list(self._ensure(session_id, None).history)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def set_window_size(self, session_id: str, window_size: int) -> None:
        self._ensure(session_id, None).window_size = window_size

    def get_window_size(self, session_id: str) -> int:
        # An expired session will be recreated with the default window.
        session = self._sessions.get(session_id)
        if (
            session is None
            or session.window_size is None
            or self._is_expired(session, self._clock())
        ):
            return self._default_window_size
        return session.window_size

    def update_user_profile(self, session_id: str, profile: UserProfile) -> None:
        session = self._sessions.get(session_id)
        if session is not None:
            session.user_profile = profile

    def cleanup_expired_sessions(self) -> int:
        now = self._clock()
        expired = [
            sid for sid, s in self._sessions.items() if self._is_expired(s, now)
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Evicted %d expired session(s)", len(expired))
        return len(expired)
