"""Conversation orchestrator.

``ChatSession.send_message`` runs one turn:

1. blank input is ignored without touching state;
2. the user message is appended, even if it is refused later;
3. loading is switched on and any stale error cleared;
4. with a user id, the policy gate runs; a refusal becomes an assistant
   message and ends the turn (denylist and intent refusals also start the
   user's cooldown);
5. context is extracted from the message and merged into the session;
6. the message is classified; the stored category only changes on a match;
7. a category-aware prompt with follow-up questions is composed when the
   classifier is confident and something is missing, else the
   context-only prompt;
8. the prompt is sanity checked;
9. the language model answers and the reply is appended;
10. any failure in 5-9 lands in ``error`` with no assistant message;
11. loading is always switched off.

Callers must not run two turns of the same session concurrently.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from pickleai.configs.system import ChatConfig
from pickleai.core.context import UserContext, extract_context_from_message, merge_context
from pickleai.core.intent import analyze_user_message, generate_follow_up_questions
from pickleai.core.llm.client import LanguageModelClient
from pickleai.core.metrics import (
    CATEGORY_MATCHES_TOTAL,
    CHAT_MESSAGES_TOTAL,
    CHAT_TURN_DURATION_SECONDS,
    FOLLOW_UP_PROMPTS_TOTAL,
)
from pickleai.core.prompt import build_context_prompt, generate_intelligent_system_prompt
from pickleai.core.security import SecurityGate, validate_system_prompt
from pickleai.infra.random_source import RandomSource, default_random_source
from pickleai.infra.telemetry import (
    ATTR_CHAT_CATEGORY,
    ATTR_CHAT_MISSING_INFO,
    ATTR_CHAT_OUTCOME,
    ATTR_SECURITY_ALLOWED,
    ATTR_SECURITY_RATE_LIMITED,
    SPAN_CHAT_TURN,
    SPAN_SECURITY_CHECK,
    tracer,
)

from .exceptions import PromptValidationError
from .models import ChatMessage, ChatState
from .store import ChatStore, StateListener

logger = logging.getLogger(__name__)

_GENERIC_ERROR = "Something went wrong"


class ChatSession:
    """One conversation: its state store plus the collaborators of a turn."""

    def __init__(
        self,
        llm: LanguageModelClient,
        gate: SecurityGate | None = None,
        config: ChatConfig | None = None,
        rng: RandomSource | None = None,
    ) -> None:
        self._llm = llm
        self._gate = gate
        self._config = config or ChatConfig()
        self._rng = rng or default_random_source()
        self._store = ChatStore()

    # -- state access ------------------------------------------------------

    def get_state(self) -> ChatState:
        return self._store.snapshot()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        return self._store.subscribe(listener)

    @property
    def message_count(self) -> int:
        return len(self._store.state.messages)

    @property
    def last_message(self) -> ChatMessage | None:
        messages = self._store.state.messages
        return messages[-1] if messages else None

    def get_message_by_id(self, message_id: str) -> ChatMessage | None:
        for message in self._store.state.messages:
            if message.id == message_id:
                return message
        return None

    @property
    def user_context(self) -> UserContext:
        return self._store.state.user_context.model_copy(deep=True)

    @property
    def conversation_category(self) -> str | None:
        return self._store.state.conversation_category

    @property
    def is_loading(self) -> bool:
        return self._store.state.is_loading

    @property
    def has_error(self) -> bool:
        return self._store.state.error is not None

    # -- mutations ---------------------------------------------------------

    def initialize_chat(self) -> None:
        """Seed the welcome message into an empty transcript."""
        if not self._store.state.messages:
            self._store.append_message("assistant", self._config.welcome_message)

    def clear_messages(self) -> None:
        self._store.reset()

    def clear_error(self) -> None:
        self._store.update(error=None)

    def update_user_context(self, partial: UserContext | Mapping[str, Any]) -> None:
        merged = merge_context(self._store.state.user_context, partial)
        self._store.update(user_context=merged)

    async def send_message(self, content: str, user_id: str | None = None) -> None:
        text = content.strip()
        if not text:
            return

        start = time.monotonic()
        outcome = "answered"
        self._store.append_message("user", text)
        self._store.update(is_loading=True, error=None)

        with tracer.start_as_current_span(SPAN_CHAT_TURN) as span:
            try:
                if user_id and not await self._passes_gate(text, user_id):
                    outcome = "refused"
                else:
                    await self._answer(text, span)
            except Exception as exc:
                outcome = "error"
                logger.warning("Chat turn failed: %s", exc)
                self._store.update(error=str(exc) or _GENERIC_ERROR)
            finally:
                self._store.update(is_loading=False)
                span.set_attribute(ATTR_CHAT_OUTCOME, outcome)
                CHAT_MESSAGES_TOTAL.labels(outcome=outcome).inc()
                CHAT_TURN_DURATION_SECONDS.observe(time.monotonic() - start)

    # -- turn steps --------------------------------------------------------

    async def _passes_gate(self, text: str, user_id: str) -> bool:
        if self._gate is None:
            return True
        with tracer.start_as_current_span(SPAN_SECURITY_CHECK) as span:
            result = await self._gate.check_message_security(text, user_id)
            span.set_attribute(ATTR_SECURITY_ALLOWED, result.allowed)
            span.set_attribute(ATTR_SECURITY_RATE_LIMITED, result.rate_limited)
        if result.allowed:
            return True

        if result.rate_limited:
            refusal = self._rate_limit_message(result.cooldown_remaining)
        else:
            await self._gate.record_violation(user_id)
            refusal = result.suggested_alternative or self._config.refusal_fallback
        self._store.append_message("assistant", refusal)
        return False

    def _rate_limit_message(self, cooldown_remaining: int | None) -> str:
        if cooldown_remaining:
            return (
                "You're sending messages a little too fast. Please wait "
                f"{cooldown_remaining} seconds and then ask me about pickleball!"
            )
        return (
            "You've reached the message limit for now. Please take a short "
            "break and try again in a little while."
        )

    async def _answer(self, text: str, span: Any) -> None:
        state = self._store.state
        context = merge_context(state.user_context, extract_context_from_message(text))
        analysis = analyze_user_message(text, context)
        category = analysis.category or state.conversation_category
        self._store.update(user_context=context, conversation_category=category)

        CATEGORY_MATCHES_TOTAL.labels(category=analysis.category or "none").inc()
        span.set_attribute(ATTR_CHAT_CATEGORY, analysis.category or "")
        span.set_attribute(ATTR_CHAT_MISSING_INFO, list(analysis.missing_info))

        system_prompt = self._compose_prompt(
            analysis.category, analysis.missing_info, analysis.confidence, context
        )
        if not validate_system_prompt(system_prompt):
            raise PromptValidationError()

        reply = await self._llm.send(
            system_prompt, list(self._store.state.messages), context
        )
        self._store.append_message("assistant", reply)

    def _compose_prompt(
        self,
        category: str | None,
        missing_info: list[str],
        confidence: float,
        context: UserContext,
    ) -> str:
        if (
            category
            and missing_info
            and confidence > self._config.follow_up_confidence_threshold
        ):
            questions = generate_follow_up_questions(
                category,
                missing_info,
                context,
                rng=self._rng,
                limit=self._config.max_follow_up_questions,
            )
            if questions:
                FOLLOW_UP_PROMPTS_TOTAL.labels(category=category).inc()
                return generate_intelligent_system_prompt(
                    category, missing_info, context, questions
                )
        return build_context_prompt(context)
