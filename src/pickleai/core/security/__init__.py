"""Policy gate and rate-limit stores."""

from .base import RateLimitRecord, RateLimitStore, SecurityResult
from .gate import (
    SecurityGate,
    build_rate_limit_store,
    detect_intents,
    validate_system_prompt,
)
from .local_backend import LocalRateLimitStore
from .redaction import redact_sensitive_content
from .redis_backend import RedisRateLimitStore

__all__ = [
    "LocalRateLimitStore",
    "RateLimitRecord",
    "RateLimitStore",
    "RedisRateLimitStore",
    "SecurityGate",
    "SecurityResult",
    "build_rate_limit_store",
    "detect_intents",
    "redact_sensitive_content",
    "validate_system_prompt",
]
