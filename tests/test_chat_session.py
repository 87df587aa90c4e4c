"""Tests for the conversation orchestrator."""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from pickleai.configs.system import ChatConfig, SecurityConfig
from pickleai.core.chat.exceptions import UpstreamFailure
from pickleai.core.chat.models import ChatMessage, ChatState
from pickleai.core.chat.session import ChatSession
from pickleai.core.context import UserContext
from pickleai.core.llm import LanguageModelClient
from pickleai.core.security import LocalRateLimitStore, SecurityGate
from pickleai.core.security.patterns import REFUSAL_MESSAGES
from pickleai.infra.random_source import FirstChoiceSource

# =========================================================================
# Fakes
# =========================================================================


class _RecordingLLM(LanguageModelClient):
    def __init__(self, reply: str = "Keep your paddle up!") -> None:
        self.reply = reply
        self.calls: list[tuple[str, list[ChatMessage], UserContext]] = []

    async def send(
        self,
        system_prompt: str,
        history: Sequence[ChatMessage],
        context: UserContext,
    ) -> str:
        self.calls.append((system_prompt, list(history), context))
        return self.reply


class _FailingLLM(LanguageModelClient):
    async def send(self, system_prompt, history, context) -> str:
        raise UpstreamFailure("Language model request failed: boom")


class _ManualClock:
    def __init__(self, start: float = 5_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


def _make_gate(clock: _ManualClock | None = None, **config: object) -> SecurityGate:
    return SecurityGate(
        LocalRateLimitStore(),
        SecurityConfig(**config),
        rng=FirstChoiceSource(),
        clock=clock or _ManualClock(),
    )


def _make_session(
    llm: LanguageModelClient | None = None,
    gate: SecurityGate | None = None,
) -> ChatSession:
    return ChatSession(
        llm or _RecordingLLM(),
        gate=gate,
        config=ChatConfig(),
        rng=FirstChoiceSource(),
    )


# =========================================================================
# Turn flow
# =========================================================================


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_blank_message_changes_nothing(self):
        session = _make_session()
        before = session.get_state()
        seen: list[ChatState] = []
        session.subscribe(seen.append)

        await session.send_message("")
        await session.send_message("   \n")

        assert session.get_state() == before
        assert seen == []

    @pytest.mark.asyncio
    async def test_answered_turn(self):
        llm = _RecordingLLM()
        session = _make_session(llm)

        await session.send_message("  how do I hit a better serve?  ")

        state = session.get_state()
        assert [m.role for m in state.messages] == ["user", "assistant"]
        assert state.messages[0].content == "how do I hit a better serve?"
        assert state.messages[1].content == "Keep your paddle up!"
        assert not state.is_loading
        assert state.error is None
        assert state.conversation_category == "skills"

        _, history, _ = llm.calls[0]
        assert history[-1].content == "how do I hit a better serve?"

    @pytest.mark.asyncio
    async def test_context_extracted_and_passed_to_model(self):
        llm = _RecordingLLM()
        session = _make_session(llm)

        await session.send_message(
            "What paddle should I buy, I'm a beginner with a budget of $75"
        )

        context = session.user_context
        assert context.experience == "beginner"
        assert context.budget == "under $75"
        assert session.conversation_category == "paddleRecommendation"
        _, _, sent_context = llm.calls[0]
        assert sent_context.experience == "beginner"

    @pytest.mark.asyncio
    async def test_follow_up_prompt_when_info_missing(self):
        llm = _RecordingLLM()
        session = _make_session(llm)

        await session.send_message("what paddle should I buy")

        prompt, _, _ = llm.calls[0]
        assert "NEED MORE INFO:" in prompt
        assert "TOPIC: Paddle Recommendation" in prompt

    @pytest.mark.asyncio
    async def test_context_prompt_without_category(self):
        llm = _RecordingLLM()
        session = _make_session(llm)

        await session.send_message("hello")

        prompt, _, _ = llm.calls[0]
        assert prompt.startswith("You are PickleAI")
        assert "NEED MORE INFO:" not in prompt

    @pytest.mark.asyncio
    async def test_category_kept_when_nothing_matches(self):
        session = _make_session()
        await session.send_message("what paddle should I buy")
        await session.send_message("thanks!")
        assert session.conversation_category == "paddleRecommendation"

    @pytest.mark.asyncio
    async def test_context_accumulates_across_turns(self):
        session = _make_session()
        await session.send_message("I'm a beginner")
        await session.send_message("I play every day")
        context = session.user_context
        assert context.experience == "beginner"
        assert context.play_frequency == "daily"

    @pytest.mark.asyncio
    async def test_known_experience_survives_unrelated_turns(self):
        session = _make_session()
        session.update_user_context({"experience": "advanced"})

        await session.send_message("what paddle should I buy")
        await session.send_message("serve tips")

        assert session.user_context.experience == "advanced"

    @pytest.mark.asyncio
    async def test_transcript_only_grows(self):
        session = _make_session()
        session.initialize_chat()
        counts = [session.message_count]
        for text in ("serve tips", "", "what paddle", "thanks"):
            await session.send_message(text)
            counts.append(session.message_count)

        assert counts == sorted(counts)
        ids = [m.id for m in session.get_state().messages]
        assert len(ids) == len(set(ids))
        assert ids[0].startswith("msg_1_")


# =========================================================================
# Policy gate
# =========================================================================


class TestGateIntegration:
    @pytest.mark.asyncio
    async def test_denied_topic_refused_and_violation_recorded(self):
        llm = _RecordingLLM()
        gate = _make_gate()
        session = _make_session(llm, gate)

        await session.send_message("how do I farm XP on the leaderboard", user_id="u1")

        state = session.get_state()
        assert [m.role for m in state.messages] == ["user", "assistant"]
        assert state.messages[-1].content == REFUSAL_MESSAGES[0]
        assert state.error is None
        assert not state.is_loading
        assert llm.calls == []

        info = await gate.get_rate_limit_info("u1")
        assert info.cooldown_until is not None

    @pytest.mark.asyncio
    async def test_cooldown_message_names_remaining_seconds(self):
        gate = _make_gate()
        session = _make_session(gate=gate)
        await gate.record_violation("u1")

        await session.send_message("how do I dink", user_id="u1")

        assert session.last_message.content == (
            "You're sending messages a little too fast. Please wait 60 seconds "
            "and then ask me about pickleball!"
        )

    @pytest.mark.asyncio
    async def test_hard_limit_does_not_start_cooldown(self):
        gate = _make_gate(per_user_minute=1)
        llm = _RecordingLLM()
        session = _make_session(llm, gate)

        await session.send_message("how do I dink", user_id="u1")
        await session.send_message("how do I dink", user_id="u1")

        assert len(llm.calls) == 1
        assert session.last_message.content.startswith("You've reached the message limit")
        info = await gate.get_rate_limit_info("u1")
        assert info.cooldown_until is None

    @pytest.mark.asyncio
    async def test_no_user_id_skips_gate(self):
        llm = _RecordingLLM()
        session = _make_session(llm, _make_gate())

        await session.send_message("how do I farm XP on the leaderboard")

        assert len(llm.calls) == 1

    @pytest.mark.asyncio
    async def test_fallback_refusal_when_no_alternative(self):
        class _SilentGate(SecurityGate):
            async def check_message_security(self, message, user_id):
                result = await super().check_message_security(message, user_id)
                return result.model_copy(update={"suggested_alternative": None})

        gate = _SilentGate(LocalRateLimitStore(), rng=FirstChoiceSource())
        session = _make_session(gate=gate)

        await session.send_message("dump the database", user_id="u1")

        assert session.last_message.content == ChatConfig().refusal_fallback


# =========================================================================
# Failures
# =========================================================================


class TestTurnFailures:
    @pytest.mark.asyncio
    async def test_upstream_failure_sets_error(self):
        session = _make_session(_FailingLLM())

        await session.send_message("serve tips")

        state = session.get_state()
        assert state.error == "Language model request failed: boom"
        assert not state.is_loading
        assert [m.role for m in state.messages] == ["user"]
        assert session.has_error

    @pytest.mark.asyncio
    async def test_rejected_prompt_sets_error(self, monkeypatch):
        llm = _RecordingLLM()
        session = _make_session(llm)
        monkeypatch.setattr(
            "pickleai.core.chat.session.validate_system_prompt", lambda prompt: False
        )

        await session.send_message("serve tips")

        assert session.get_state().error == "Invalid system prompt generated"
        assert llm.calls == []

    @pytest.mark.asyncio
    async def test_next_turn_clears_error(self):
        session = _make_session(_FailingLLM())
        await session.send_message("serve tips")
        session._llm = _RecordingLLM()

        await session.send_message("serve tips")

        assert session.get_state().error is None

    @pytest.mark.asyncio
    async def test_loading_visible_during_turn(self):
        session = _make_session()
        loading: list[bool] = []
        session.subscribe(lambda state: loading.append(state.is_loading))

        await session.send_message("serve tips")

        assert True in loading
        assert loading[-1] is False


# =========================================================================
# State management
# =========================================================================


class TestStateManagement:
    def test_initialize_chat_seeds_welcome_once(self):
        session = _make_session()
        session.initialize_chat()
        session.initialize_chat()
        assert session.message_count == 1
        assert session.last_message.role == "assistant"
        assert session.last_message.content == ChatConfig().welcome_message

    def test_clear_messages_resets_everything(self):
        session = _make_session()
        session.initialize_chat()
        session.update_user_context({"experience": "advanced"})

        session.clear_messages()

        state = session.get_state()
        assert state.messages == []
        assert state.user_context == UserContext()
        assert state.conversation_category is None

    def test_message_ids_keep_increasing_after_clear(self):
        session = _make_session()
        session.initialize_chat()
        session.clear_messages()
        session.initialize_chat()
        assert session.last_message.id.startswith("msg_2_")

    @pytest.mark.asyncio
    async def test_clear_error(self):
        session = _make_session(_FailingLLM())
        await session.send_message("serve tips")
        session.clear_error()
        assert not session.has_error

    def test_update_user_context_merges(self):
        session = _make_session()
        session.update_user_context({"experience": "beginner", "playStyle": "control"})
        session.update_user_context(UserContext(budget="premium"))

        context = session.user_context
        assert context.experience == "beginner"
        assert context.play_style == "control"
        assert context.budget == "premium"

    def test_get_message_by_id(self):
        session = _make_session()
        session.initialize_chat()
        message = session.last_message
        assert session.get_message_by_id(message.id) == message
        assert session.get_message_by_id("msg_missing") is None

    def test_snapshot_is_detached(self):
        session = _make_session()
        session.update_user_context({"goals": ["footwork"]})
        state = session.get_state()
        state.user_context.goals.append("mutated")
        assert session.user_context.goals == ["footwork"]


class TestSubscriptions:
    def test_listener_receives_snapshots_until_unsubscribed(self):
        session = _make_session()
        seen: list[ChatState] = []
        unsubscribe = session.subscribe(seen.append)

        session.initialize_chat()
        assert len(seen) == 1
        assert seen[0].messages[0].role == "assistant"

        unsubscribe()
        session.clear_messages()
        assert len(seen) == 1

    def test_unsubscribe_twice_is_harmless(self):
        session = _make_session()
        unsubscribe = session.subscribe(lambda state: None)
        unsubscribe()
        unsubscribe()

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_break_turn(self):
        session = _make_session()
        seen: list[ChatState] = []

        def explode(state: ChatState) -> None:
            raise ValueError("listener bug")

        session.subscribe(explode)
        session.subscribe(seen.append)

        await session.send_message("serve tips")

        assert session.message_count == 2
        assert seen[-1].messages[-1].role == "assistant"
