"""Root logger setup for the PickleAI service.

``setup_logging`` runs once in the application lifespan.  Records leave
through a single stdout handler, as JSON objects (``json_output``) or as
coloured lines for local work.

Every record carries three correlation fields:

``session_id``
    the chat session whose turn is running, bound by
    ``bind_session_id`` while the registry holds the session lock;
``trace_id`` / ``span_id``
    the active OpenTelemetry span, so gate, classifier and model logs of
    one turn line up with its ``chat.turn`` span.

Fields are empty strings outside a turn.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from opentelemetry import trace

from pickleai.configs.system import LoggingConfig

_session_id: ContextVar[str] = ContextVar("pickleai_session_id", default="")

_JSON_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s %(message)s "
    "%(session_id)s %(trace_id)s %(span_id)s"
)
_JSON_RENAMES = {"asctime": "timestamp", "levelname": "level", "name": "logger"}
_DEV_FORMAT = "%(levelprefix)s %(asctime)s [%(session_id)s] %(name)s  %(message)s"
_DEV_DATEFMT = "%H:%M:%S"


@contextmanager
def bind_session_id(session_id: str) -> Iterator[None]:
    """Tag records logged inside the block with *session_id*."""
    token = _session_id.set(session_id)
    try:
        yield
    finally:
        _session_id.reset(token)


class ChatContextFilter(logging.Filter):
    """Adds ``session_id``, ``trace_id`` and ``span_id`` to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()  # type: ignore[attr-defined]
        ctx = trace.get_current_span().get_span_context()
        if ctx.is_valid:
            record.trace_id = format(ctx.trace_id, "032x")  # type: ignore[attr-defined]
            record.span_id = format(ctx.span_id, "016x")  # type: ignore[attr-defined]
        else:
            record.trace_id = ""  # type: ignore[attr-defined]
            record.span_id = ""  # type: ignore[attr-defined]
        return True


def _build_formatter(json_output: bool) -> logging.Formatter:
    if json_output:
        from pythonjsonlogger.json import JsonFormatter

        return JsonFormatter(
            fmt=_JSON_FORMAT,
            rename_fields=_JSON_RENAMES,
            defaults={"session_id": "", "trace_id": "", "span_id": ""},
        )

    from uvicorn.logging import DefaultFormatter

    return DefaultFormatter(fmt=_DEV_FORMAT, datefmt=_DEV_DATEFMT, use_colors=True)


def setup_logging(config: LoggingConfig | None = None) -> logging.Handler:
    """Install the PickleAI handler on the root and uvicorn loggers."""
    config = config or LoggingConfig()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ChatContextFilter())
    handler.setFormatter(_build_formatter(config.json_output))

    root = logging.getLogger()
    root.setLevel(config.level.upper())
    root.handlers = [handler]

    # uvicorn installs its own handlers; route its records through ours.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [handler]
        uvicorn_logger.propagate = False

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    return handler
