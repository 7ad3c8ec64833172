"""Conversation session storage.

One in-process backend is provided (``InMemorySessionStore``); anything
implementing ``SessionStore`` (e.g. a shared cache for multi-process
deployments) can be attached to ``app.state.session_store`` instead.
"""

from .base import Session, SessionSnapshot, SessionStore
from .eviction import SessionEvictor, build_session_store, get_session_store
from .memory import InMemorySessionStore

__all__ = [
    "InMemorySessionStore",
    "Session",
    "SessionEvictor",
    "SessionSnapshot",
    "SessionStore",
    "build_session_store",
    "get_session_store",
]
