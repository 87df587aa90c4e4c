"""Transcript and state models for one conversation."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from pickleai.core.context.models import UserContext


class ChatMessage(BaseModel):
    """A single message in the conversation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique id, msg_<seq>_<random>")
    role: Literal["user", "assistant"] = Field(description="Message sender role")
    content: str = Field(description="Message content")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ChatState(BaseModel):
    """Everything a UI needs to render one conversation."""

    messages: list[ChatMessage] = Field(default_factory=list)
    user_context: UserContext = Field(default_factory=UserContext)
    conversation_category: str | None = None
    is_loading: bool = False
    error: str | None = None
