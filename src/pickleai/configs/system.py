from datetime import timedelta
from typing import Literal

from pydantic import BaseModel, Field

ALL_INTENTS = [
    "app_help",
    "kb_answer",
    "pickleball_tip_basic",
    "dupr_self",
    "skills_advice",
    "rules_explanation",
    "equipment_recommendation",
    "general_pickleball",
]


class ThirdPartyConfig(BaseModel):
    """Configuration for third-party integrations."""

    redis_uri: str = Field(
        default="redis://localhost:6379",
        description="Redis connection URI for the shared rate-limit store",
    )


class APIConfig(BaseModel):
    """API configuration settings."""

    max_message_length: int = Field(
        default=1024, description="Maximum accepted length of a chat message"
    )
    max_sessions: int = Field(
        default=1000, description="Maximum number of live chat sessions"
    )
    session_idle_timeout: timedelta = Field(
        default=timedelta(minutes=30),
        description="Sessions untouched for this long are evicted to free a slot",
    )


class SecurityConfig(BaseModel):
    """Policy gate settings: rate limits, cooldown and intent allow-list."""

    per_user_minute: int = Field(
        default=20, description="Requests allowed per user per minute window"
    )
    per_user_day: int = Field(
        default=300, description="Requests allowed per user per day window"
    )
    cooldown: timedelta = Field(
        default=timedelta(seconds=60),
        description="Penalty window after a policy violation",
    )
    minute_window: timedelta = Field(
        default=timedelta(seconds=60), description="Length of the short window"
    )
    day_window: timedelta = Field(
        default=timedelta(days=1), description="Length of the long window"
    )
    allowed_intents: list[str] = Field(
        default_factory=lambda: list(ALL_INTENTS),
        description="Intents the assistant is allowed to serve",
    )
    backend: Literal["auto", "local", "redis"] = Field(
        default="auto",
        description="Rate-limit store; 'auto' uses Redis when reachable",
    )


class ChatConfig(BaseModel):
    """Configuration for chat settings."""

    welcome_message: str = Field(
        default=(
            "Hi! I'm PickleAI, your pickleball assistant. Choose a topic "
            "above or ask me anything about pickleball!"
        ),
        description="Assistant message seeded into an empty transcript",
    )
    refusal_fallback: str = Field(
        default=(
            "I can't help with that topic, but I'd be happy to assist with "
            "pickleball questions!"
        ),
        description="Refusal text used when the gate offers no alternative",
    )
    follow_up_confidence_threshold: float = Field(
        default=0.3,
        description="Classifier confidence above which follow-ups are asked",
    )
    max_follow_up_questions: int = Field(
        default=2, description="Upper bound on follow-up questions per turn"
    )
    max_history_messages: int = Field(
        default=20, description="Messages forwarded to the language model"
    )


class LLMConfig(BaseModel):
    """Language model client settings."""

    endpoint: str | None = Field(
        default=None, description="OpenAI-compatible base URL (None = OpenAI)"
    )
    api_key: str = Field(default="EMPTY", description="API key for the endpoint")
    model_name: str = Field(default="gpt-3.5-turbo", description="Model name")
    temperature: float = Field(default=0.7, description="Sampling temperature")
    max_tokens: int = Field(default=500, description="Maximum response tokens")
    model_timeout: timedelta = Field(
        default=timedelta(seconds=30), description="Timeout for one model call"
    )
    max_retries: int = Field(default=2, description="Client-side retries")


class LoggingConfig(BaseModel):
    """Root logger settings."""

    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(
        default=True, description="Emit JSON lines instead of coloured text"
    )
    quiet_loggers: list[str] = Field(
        default_factory=lambda: ["httpx", "httpcore", "openai"],
        description="Noisy client libraries capped at WARNING",
    )
