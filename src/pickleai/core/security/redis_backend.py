"""Shared rate-limit store backed by Redis hashes and Lua scripts.

Lets several stateless API instances enforce one set of per-user limits.
Each user owns one hash; keys expire a while after the day window so
abandoned users clean themselves up.
"""

from __future__ import annotations

import logging

from redis.asyncio import Redis

from .base import RateLimitRecord, RateLimitStore

logger = logging.getLogger(__name__)

_KEY = "pickleai:ratelimit:{user_id}"

# Atomically roll expired windows and count one request.
# KEYS[1] = user hash. ARGV = now, minute window, day window, ttl seconds.
# Returns {minute_count, minute_start, day_count, day_start,
#          last_refusal, cooldown_until} as strings ('' when unset).
_LUA_INCREMENT = """
local key = KEYS[1]
local now = tonumber(ARGV[1])
local minute_window = tonumber(ARGV[2])
local day_window = tonumber(ARGV[3])
local ttl = tonumber(ARGV[4])

local minute_start = tonumber(redis.call('HGET', key, 'minute_start') or '')
if not minute_start or now - minute_start >= minute_window then
    redis.call('HSET', key, 'minute_start', ARGV[1], 'minute_count', 0)
end
local day_start = tonumber(redis.call('HGET', key, 'day_start') or '')
if not day_start or now - day_start >= day_window then
    redis.call('HSET', key, 'day_start', ARGV[1], 'day_count', 0)
end

redis.call('HINCRBY', key, 'minute_count', 1)
redis.call('HINCRBY', key, 'day_count', 1)
redis.call('EXPIRE', key, ttl)

return redis.call('HMGET', key, 'minute_count', 'minute_start', 'day_count',
                  'day_start', 'last_refusal', 'cooldown_until')
"""

# KEYS[1] = user hash. ARGV = now, cooldown_until, ttl seconds.
_LUA_SET_COOLDOWN = """
local key = KEYS[1]
redis.call('HSET', key, 'last_refusal', ARGV[1], 'cooldown_until', ARGV[2])
redis.call('EXPIRE', key, tonumber(ARGV[3]))
return 0
"""

_FIELDS = (
    "minute_count",
    "minute_start",
    "day_count",
    "day_start",
    "last_refusal",
    "cooldown_until",
)


def _to_float(value: str | bytes | None) -> float | None:
    if not value:
        return None
    return float(value)


def _to_record(user_id: str, values: list[str | bytes | None]) -> RateLimitRecord:
    raw = dict(zip(_FIELDS, values))
    return RateLimitRecord(
        user_id=user_id,
        requests_this_minute=int(_to_float(raw["minute_count"]) or 0),
        minute_window_start=_to_float(raw["minute_start"]) or 0.0,
        requests_today=int(_to_float(raw["day_count"]) or 0),
        day_window_start=_to_float(raw["day_start"]) or 0.0,
        last_refusal_time=_to_float(raw["last_refusal"]),
        cooldown_until=_to_float(raw["cooldown_until"]),
    )


class RedisRateLimitStore(RateLimitStore):
    """Distributed records; atomicity comes from server-side Lua."""

    def __init__(self, redis: Redis, ttl_seconds: int = 2 * 24 * 60 * 60) -> None:
        self._redis = redis
        self._ttl_seconds = ttl_seconds
        self._increment_sha: str | None = None
        self._cooldown_sha: str | None = None

    async def _ensure_scripts(self) -> None:
        if self._increment_sha is None:
            self._increment_sha = await self._redis.script_load(_LUA_INCREMENT)
            self._cooldown_sha = await self._redis.script_load(_LUA_SET_COOLDOWN)

    async def get(self, user_id: str) -> RateLimitRecord | None:
        key = _KEY.format(user_id=user_id)
        values = await self._redis.hmget(key, list(_FIELDS))
        if all(v is None for v in values):
            return None
        return _to_record(user_id, values)

    async def increment(
        self,
        user_id: str,
        now: float,
        minute_window: float,
        day_window: float,
    ) -> RateLimitRecord:
        await self._ensure_scripts()
        ttl = max(self._ttl_seconds, int(day_window) + 1)
        values = await self._redis.evalsha(
            self._increment_sha,  # type: ignore[arg-type]
            1,
            _KEY.format(user_id=user_id),
            repr(now),
            repr(minute_window),
            repr(day_window),
            str(ttl),
        )
        return _to_record(user_id, list(values))

    async def set_cooldown(self, user_id: str, now: float, until: float) -> None:
        await self._ensure_scripts()
        await self._redis.evalsha(
            self._cooldown_sha,  # type: ignore[arg-type]
            1,
            _KEY.format(user_id=user_id),
            repr(now),
            repr(until),
            str(self._ttl_seconds),
        )

    async def reset(self, user_id: str) -> None:
        await self._redis.delete(_KEY.format(user_id=user_id))

    async def aclose(self) -> None:
        # Redis client lifecycle is managed externally (infra/redis.py).
        pass
