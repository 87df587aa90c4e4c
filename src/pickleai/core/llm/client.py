"""Language model collaborator used by the chat orchestrator."""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from pickleai.configs.system import LLMConfig
from pickleai.core.chat.exceptions import UpstreamFailure
from pickleai.core.chat.models import ChatMessage
from pickleai.core.context.models import UserContext
from pickleai.core.metrics import LLM_CALLS_TOTAL, LLM_LATENCY_SECONDS
from pickleai.core.security.redaction import redact_sensitive_content
from pickleai.infra.telemetry import (
    ATTR_LLM_HISTORY_LEN,
    ATTR_LLM_MODEL,
    SPAN_LLM_CALL,
    tracer,
)

logger = logging.getLogger(__name__)


class LanguageModelClient(ABC):
    """Produces the assistant reply for one turn.

    Implementations must be safe to retry and should raise
    ``UpstreamFailure`` for network, auth, timeout or empty responses.
    """

    @abstractmethod
    async def send(
        self,
        system_prompt: str,
        history: Sequence[ChatMessage],
        context: UserContext,
    ) -> str: ...


def to_langchain_messages(
    system_prompt: str, history: Sequence[ChatMessage], max_history: int
) -> list[BaseMessage]:
    """System message followed by the last *max_history* transcript messages."""
    recent = list(history)[-max_history:] if max_history > 0 else []
    messages: list[BaseMessage] = [SystemMessage(content=system_prompt)]
    for msg in recent:
        if msg.role == "user":
            messages.append(HumanMessage(content=msg.content))
        else:
            messages.append(AIMessage(content=msg.content))
    return messages


def _content_text(content: str | list) -> str:
    if isinstance(content, str):
        return content
    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class ChatModelClient(LanguageModelClient):
    """``LanguageModelClient`` over any LangChain chat model."""

    def __init__(
        self,
        llm: BaseChatModel,
        config: LLMConfig | None = None,
        max_history_messages: int = 20,
    ) -> None:
        self._llm = llm
        self._config = config or LLMConfig()
        self._max_history = max_history_messages

    async def send(
        self,
        system_prompt: str,
        history: Sequence[ChatMessage],
        context: UserContext,
    ) -> str:
        messages = to_langchain_messages(system_prompt, history, self._max_history)
        model_name = self._config.model_name
        timeout = self._config.model_timeout.total_seconds()

        with tracer.start_as_current_span(SPAN_LLM_CALL) as span:
            span.set_attribute(ATTR_LLM_MODEL, model_name)
            span.set_attribute(ATTR_LLM_HISTORY_LEN, len(messages) - 1)
            start = time.monotonic()
            try:
                async with asyncio.timeout(timeout):
                    response = await self._llm.ainvoke(
                        messages,
                        config={
                            "metadata": {
                                "user_context": context.model_dump(
                                    by_alias=True, exclude_none=True
                                )
                            }
                        },
                    )
            except TimeoutError as exc:
                LLM_CALLS_TOTAL.labels(model_name=model_name, status="timeout").inc()
                raise UpstreamFailure(
                    f"Language model timed out after {timeout:g}s"
                ) from exc
            except Exception as exc:
                LLM_CALLS_TOTAL.labels(model_name=model_name, status="error").inc()
                logger.warning("Language model call failed: %s", exc)
                raise UpstreamFailure(f"Language model request failed: {exc}") from exc
            finally:
                LLM_LATENCY_SECONDS.labels(model_name=model_name).observe(
                    time.monotonic() - start
                )

        text = _content_text(response.content)
        if not text.strip():
            LLM_CALLS_TOTAL.labels(model_name=model_name, status="error").inc()
            raise UpstreamFailure("Language model returned an empty response")

        LLM_CALLS_TOTAL.labels(model_name=model_name, status="ok").inc()
        return redact_sensitive_content(text.strip())
