"""Policy gate results and the abstract rate-limit store."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field


class SecurityResult(BaseModel):
    """Outcome of ``SecurityGate.check_message_security``."""

    allowed: bool
    reason: str | None = None
    suggested_alternative: str | None = Field(
        default=None, description="Friendly refusal that steers to allowed topics"
    )
    rate_limited: bool = False
    cooldown_remaining: int | None = Field(
        default=None, description="Seconds left in a post-violation cooldown"
    )


class RateLimitRecord(BaseModel):
    """Per-user counters.  Timestamps are epoch seconds."""

    user_id: str
    requests_this_minute: int = 0
    minute_window_start: float = 0.0
    requests_today: int = 0
    day_window_start: float = 0.0
    last_refusal_time: float | None = None
    cooldown_until: float | None = None

    def in_cooldown(self, now: float) -> bool:
        return self.cooldown_until is not None and now < self.cooldown_until


class RateLimitStore(ABC):
    """Storage for ``RateLimitRecord`` keyed by user id.

    ``increment`` must be atomic per user: the counters it returns are the
    values after this request was counted, so two concurrent requests can
    never both observe the same count.
    """

    @abstractmethod
    async def get(self, user_id: str) -> RateLimitRecord | None:
        """Return the user's record, or ``None`` if none exists yet."""

    @abstractmethod
    async def increment(
        self,
        user_id: str,
        now: float,
        minute_window: float,
        day_window: float,
    ) -> RateLimitRecord:
        """Restart expired windows, count one request, return the new record."""

    @abstractmethod
    async def set_cooldown(self, user_id: str, now: float, until: float) -> None:
        """Stamp a violation at ``now`` and block the user until ``until``."""

    @abstractmethod
    async def reset(self, user_id: str) -> None:
        """Forget everything about ``user_id``."""

    @abstractmethod
    async def aclose(self) -> None:
        """Release any resources held by the store."""
