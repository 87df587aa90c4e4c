"""Policy gate: rate limiting, denylist and intent allow-list.

Checks run in a fixed order and stop at the first rejection:

1. cooldown left over from an earlier violation, then the per-minute and
   per-day ceilings (these rejections carry ``rate_limited=True``);
2. the denylist of off-lane topics;
3. the intent allow-list.

The gate never penalises a user by itself.  Callers that receive a
denylist or intent rejection invoke ``record_violation`` to start the
cooldown; rate-limit rejections do not extend it.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable

from redis.asyncio import Redis

from pickleai.configs.system import SecurityConfig
from pickleai.core.metrics import GATE_REJECTIONS_TOTAL
from pickleai.infra.random_source import RandomSource, default_random_source

from .base import RateLimitRecord, RateLimitStore, SecurityResult
from .local_backend import LocalRateLimitStore
from .patterns import (
    DENIED_PATTERNS,
    INTENT_PATTERNS,
    PROMPT_INJECTION_PATTERNS,
    REFUSAL_MESSAGES,
)
from .redis_backend import RedisRateLimitStore

logger = logging.getLogger(__name__)

REASON_COOLDOWN = "Rate limited due to previous violations"
REASON_MINUTE_LIMIT = "Too many requests per minute"
REASON_DAY_LIMIT = "Daily request limit exceeded"
REASON_TOPIC = "Topic not allowed"


def detect_intents(message: str) -> list[str]:
    """Return every intent whose keyword family occurs in *message*."""
    lowered = message.lower()
    return [intent for intent, pattern in INTENT_PATTERNS.items() if pattern.search(lowered)]


def validate_system_prompt(prompt: str) -> bool:
    """``False`` if *prompt* contains an injection-style phrase."""
    return not any(pattern.search(prompt) for pattern in PROMPT_INJECTION_PATTERNS)


class SecurityGate:
    """Per-user policy checks over an injectable ``RateLimitStore``."""

    def __init__(
        self,
        store: RateLimitStore,
        config: SecurityConfig | None = None,
        rng: RandomSource | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._config = config or SecurityConfig()
        self._rng = rng or default_random_source()
        self._clock = clock

    @property
    def store(self) -> RateLimitStore:
        return self._store

    async def check_message_security(self, message: str, user_id: str) -> SecurityResult:
        result = await self._check_rate_limit(user_id)
        if result.allowed:
            result = self._check_denied_patterns(message)
        if result.allowed:
            result = self._check_intents(message)
        if not result.allowed:
            logger.info("Message from %s rejected: %s", user_id, result.reason)
        return result

    async def _check_rate_limit(self, user_id: str) -> SecurityResult:
        now = self._clock()
        record = await self._store.get(user_id)
        if record is not None and record.in_cooldown(now):
            GATE_REJECTIONS_TOTAL.labels(reason="cooldown").inc()
            return SecurityResult(
                allowed=False,
                reason=REASON_COOLDOWN,
                rate_limited=True,
                cooldown_remaining=math.ceil(record.cooldown_until - now),  # type: ignore[operator]
            )

        record = await self._store.increment(
            user_id,
            now,
            self._config.minute_window.total_seconds(),
            self._config.day_window.total_seconds(),
        )
        if record.requests_this_minute > self._config.per_user_minute:
            GATE_REJECTIONS_TOTAL.labels(reason="minute").inc()
            return SecurityResult(allowed=False, reason=REASON_MINUTE_LIMIT, rate_limited=True)
        if record.requests_today > self._config.per_user_day:
            GATE_REJECTIONS_TOTAL.labels(reason="day").inc()
            return SecurityResult(allowed=False, reason=REASON_DAY_LIMIT, rate_limited=True)
        return SecurityResult(allowed=True)

    def _check_denied_patterns(self, message: str) -> SecurityResult:
        lowered = message.lower()
        if any(pattern.search(lowered) for pattern in DENIED_PATTERNS):
            GATE_REJECTIONS_TOTAL.labels(reason="denylist").inc()
            return SecurityResult(
                allowed=False,
                reason=REASON_TOPIC,
                suggested_alternative=self._refusal_message(),
            )
        return SecurityResult(allowed=True)

    def _check_intents(self, message: str) -> SecurityResult:
        allowed = set(self._config.allowed_intents)
        disallowed = [intent for intent in detect_intents(message) if intent not in allowed]
        if disallowed:
            GATE_REJECTIONS_TOTAL.labels(reason="intent").inc()
            return SecurityResult(
                allowed=False,
                reason=f"Intent not allowed: {', '.join(disallowed)}",
                suggested_alternative=self._refusal_message(),
            )
        return SecurityResult(allowed=True)

    def _refusal_message(self) -> str:
        return self._rng.choice(REFUSAL_MESSAGES)

    def detect_intents(self, message: str) -> list[str]:
        return detect_intents(message)

    def validate_system_prompt(self, prompt: str) -> bool:
        return validate_system_prompt(prompt)

    async def record_violation(self, user_id: str) -> None:
        """Start the post-violation cooldown for *user_id*."""
        now = self._clock()
        await self._store.set_cooldown(user_id, now, now + self._config.cooldown.total_seconds())
        logger.info(
            "Recorded violation for %s; cooldown %ss",
            user_id,
            int(self._config.cooldown.total_seconds()),
        )

    async def get_rate_limit_info(self, user_id: str) -> RateLimitRecord | None:
        return await self._store.get(user_id)

    async def reset_rate_limits(self, user_id: str) -> None:
        await self._store.reset(user_id)

    async def aclose(self) -> None:
        await self._store.aclose()


def build_rate_limit_store(redis: Redis | None) -> RateLimitStore:
    """Redis-backed store when a verified client is given, else in-process."""
    if redis is not None:
        logger.info("Rate limits shared through Redis")
        return RedisRateLimitStore(redis)
    logger.info("Rate limits kept in process memory")
    return LocalRateLimitStore()
