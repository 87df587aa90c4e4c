"""Pydantic models for the chat API."""

from pydantic import BaseModel, Field

from pickleai.core.chat.models import ChatMessage, ChatState
from pickleai.core.context.models import UserContext


class SendMessageRequest(BaseModel):
    """Request model for posting a user message."""

    content: str = Field(description="User message text")
    user_id: str | None = Field(
        default=None,
        description="Stable caller id; without it the policy gate is skipped",
    )


class SessionResponse(BaseModel):
    """Snapshot of one chat session."""

    session_id: str = Field(description="Session identifier")
    messages: list[ChatMessage] = Field(default_factory=list)
    user_context: UserContext = Field(default_factory=UserContext)
    conversation_category: str | None = Field(
        default=None, description="Last matched conversation category"
    )
    is_loading: bool = False
    error: str | None = Field(default=None, description="Last turn failure, if any")

    @classmethod
    def from_state(cls, session_id: str, state: ChatState) -> "SessionResponse":
        return cls(
            session_id=session_id,
            messages=state.messages,
            user_context=state.user_context,
            conversation_category=state.conversation_category,
            is_loading=state.is_loading,
            error=state.error,
        )


class HealthResponse(BaseModel):
    status: str = "ok"
    sessions: int = Field(description="Live chat sessions")
