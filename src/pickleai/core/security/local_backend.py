"""Single-process rate-limit store backed by ``asyncio`` locks.

State lives only in memory: a restart forgets every counter and cooldown.
"""

from __future__ import annotations

import asyncio
import logging

from .base import RateLimitRecord, RateLimitStore

logger = logging.getLogger(__name__)

_PRUNE_INTERVAL = 60 * 60
_STALE_AFTER = 24 * 60 * 60


class LocalRateLimitStore(RateLimitStore):
    """In-process records, one ``asyncio.Lock`` per user key."""

    def __init__(self) -> None:
        self._records: dict[str, RateLimitRecord] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._last_prune = 0.0

    def _lock(self, user_id: str) -> asyncio.Lock:
        return self._locks.setdefault(user_id, asyncio.Lock())

    async def get(self, user_id: str) -> RateLimitRecord | None:
        record = self._records.get(user_id)
        return record.model_copy() if record is not None else None

    async def increment(
        self,
        user_id: str,
        now: float,
        minute_window: float,
        day_window: float,
    ) -> RateLimitRecord:
        self._maybe_prune(now)
        async with self._lock(user_id):
            record = self._records.get(user_id)
            if record is None:
                record = RateLimitRecord(
                    user_id=user_id, minute_window_start=now, day_window_start=now
                )
                self._records[user_id] = record

            if now - record.minute_window_start >= minute_window:
                record.minute_window_start = now
                record.requests_this_minute = 0
            if now - record.day_window_start >= day_window:
                record.day_window_start = now
                record.requests_today = 0

            record.requests_this_minute += 1
            record.requests_today += 1
            return record.model_copy()

    async def set_cooldown(self, user_id: str, now: float, until: float) -> None:
        async with self._lock(user_id):
            record = self._records.get(user_id)
            if record is None:
                record = RateLimitRecord(
                    user_id=user_id, minute_window_start=now, day_window_start=now
                )
                self._records[user_id] = record
            record.last_refusal_time = now
            record.cooldown_until = until

    async def reset(self, user_id: str) -> None:
        async with self._lock(user_id):
            self._records.pop(user_id, None)

    def _maybe_prune(self, now: float) -> None:
        """Drop records idle for a day with no active cooldown, at most hourly."""
        if now - self._last_prune < _PRUNE_INTERVAL:
            return
        self._last_prune = now
        stale = [
            user_id
            for user_id, record in self._records.items()
            if now - record.day_window_start > _STALE_AFTER
            and not record.in_cooldown(now)
            and not self._lock(user_id).locked()
        ]
        for user_id in stale:
            del self._records[user_id]
            self._locks.pop(user_id, None)
        if stale:
            logger.debug("Pruned %d stale rate-limit records", len(stale))

    async def aclose(self) -> None:
        self._records.clear()
        self._locks.clear()
