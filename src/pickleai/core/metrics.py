"""Prometheus metrics for the PickleAI application.

Custom business metrics that complement the auto-instrumented HTTP
metrics provided by ``prometheus-fastapi-instrumentator``.

All metrics use the ``pickleai_`` prefix.
"""

import logging

from fastapi import FastAPI
from prometheus_client import Counter, Gauge, Histogram
from prometheus_fastapi_instrumentator import Instrumentator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Chat turn metrics
# ---------------------------------------------------------------------------

CHAT_MESSAGES_TOTAL = Counter(
    "pickleai_chat_messages_total",
    "Total chat turns processed, by outcome",
    ["outcome"],  # "answered" | "refused" | "error"
)

CHAT_TURN_DURATION_SECONDS = Histogram(
    "pickleai_chat_turn_duration_seconds",
    "End-to-end duration of one send_message turn",
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30, 60),
)

CHAT_SESSIONS_ACTIVE = Gauge(
    "pickleai_chat_sessions_active",
    "Number of chat sessions held by the registry",
)

CHAT_SESSIONS_EVICTED_TOTAL = Counter(
    "pickleai_chat_sessions_evicted_total",
    "Chat sessions dropped after going idle",
)

# ---------------------------------------------------------------------------
# Routing metrics
# ---------------------------------------------------------------------------

CATEGORY_MATCHES_TOTAL = Counter(
    "pickleai_category_matches_total",
    "Messages routed to a conversation category",
    ["category"],  # category key | "none"
)

FOLLOW_UP_PROMPTS_TOTAL = Counter(
    "pickleai_follow_up_prompts_total",
    "Turns answered with a follow-up (category-aware) system prompt",
    ["category"],
)

# ---------------------------------------------------------------------------
# Policy gate metrics
# ---------------------------------------------------------------------------

GATE_REJECTIONS_TOTAL = Counter(
    "pickleai_gate_rejections_total",
    "Messages rejected by the policy gate",
    ["reason"],  # "cooldown" | "minute" | "day" | "denylist" | "intent"
)

# ---------------------------------------------------------------------------
# LLM metrics
# ---------------------------------------------------------------------------

LLM_LATENCY_SECONDS = Histogram(
    "pickleai_llm_latency_seconds",
    "Latency of language model calls",
    ["model_name"],
    buckets=(0.25, 0.5, 1, 2, 5, 10, 20, 30, 60),
)

LLM_CALLS_TOTAL = Counter(
    "pickleai_llm_calls_total",
    "Language model calls, by outcome",
    ["model_name", "status"],  # "ok" | "error" | "timeout"
)


def setup_metrics(app: FastAPI, excluded_handlers: list[str] | None = None) -> None:
    """Attach HTTP instrumentation and the ``/metrics`` endpoint to *app*."""
    Instrumentator(
        should_instrument_requests_inprogress=True,
        excluded_handlers=excluded_handlers or ["/health", "/metrics"],
    ).instrument(app).expose(app, endpoint="/metrics")

    logger.info("Prometheus metrics initialised")
