"""Conversation messages and user profiles."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["Message", "Role", "UserProfile", "utcnow"]

Role = Literal["human", "assistant", "system"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserProfile(BaseModel):
    """Contact details collected for a session (optional)."""

    fullname: str = Field(description="User's full name")
    email: str = Field(description="User's email address")
    phone: str | None = Field(default=None, description="Optional phone number")


class Message(BaseModel):
    """A single turn in a conversation. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(description="Message sender role")
    content: str = Field(description="Message text")
    timestamp: datetime | None = Field(
        default=None,
        description="Creation time; assigned by the session store when missing",
    )

    def stamped(self, now: datetime) -> "Message":
        """Return this message with ``timestamp`` filled in if absent."""
        if self.timestamp is not None:
            return self
        return self.model_copy(update={"timestamp": now})
