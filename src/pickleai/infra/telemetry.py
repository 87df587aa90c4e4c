"""OpenTelemetry helpers: the app tracer and span naming.

Only the OTEL API is used here.  Without an SDK provider installed the
tracer is a no-op, but log records still pick up whatever trace context an
embedding process provides.

Usage::

    from pickleai.infra.telemetry import SPAN_CHAT_TURN, tracer

    with tracer.start_as_current_span(SPAN_CHAT_TURN) as span:
        ...
"""

from opentelemetry import trace

tracer = trace.get_tracer("pickleai")

# ---------------------------------------------------------------------------
# Span names
# ---------------------------------------------------------------------------

SPAN_CHAT_TURN = "chat.turn"
SPAN_SECURITY_CHECK = "security.check"
SPAN_LLM_CALL = "llm.call"

# ---------------------------------------------------------------------------
# Span attribute keys
# ---------------------------------------------------------------------------

ATTR_CHAT_CATEGORY = "chat.category"
ATTR_CHAT_OUTCOME = "chat.outcome"
ATTR_CHAT_MISSING_INFO = "chat.missing_info"
ATTR_SECURITY_ALLOWED = "security.allowed"
ATTR_SECURITY_RATE_LIMITED = "security.rate_limited"
ATTR_LLM_MODEL = "llm.model"
ATTR_LLM_HISTORY_LEN = "llm.history_len"
