"""Prefixed ID generation.

Public-facing IDs use a ``{prefix}_{random}`` format so their origin is
visible at a glance, e.g. ``sess_a8Kx3nQ9mP2r`` for a chat session.
"""

import secrets
import string

SESSION_ID_PREFIX = "sess"

_ALPHABET = string.ascii_letters + string.digits
_DEFAULT_LENGTH = 12  # ~71 bits of entropy


def generate_id(prefix: str, length: int = _DEFAULT_LENGTH) -> str:
    """Generate a ``"{prefix}_{random}"`` ID with ``length`` random characters."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(length))
    return f"{prefix}_{suffix}"


def new_session_id() -> str:
    return generate_id(SESSION_ID_PREFIX)
