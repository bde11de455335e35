"""
Unit tests for the coach prompts and the conversation adapter.
"""

import httpx
import pytest

from fitbot.agents import (
    ConversationAdapter, ConversationHandle, build_greeting,
    build_system_instruction, to_external_history
)
from fitbot.llm.base import ConversationConnectionError, LLMMessage, StreamInterrupted
from fitbot.models import ChatMessage, ProgressEntry


class TestPrompts:
    """Tests for the system instruction and greeting templates."""

    def test_system_instruction_includes_profile(self, profile):
        instruction = build_system_instruction(profile)
        assert "You are FitBot" in instruction
        assert "- Name: Alex" in instruction
        assert "- Age: 30" in instruction
        assert "- Weight: 70kg" in instruction
        assert "- Height: 175cm" in instruction
        assert "- Goal: weight loss" in instruction
        assert "- Experience Level: beginner" in instruction
        assert "- Available Equipment: bodyweight" in instruction
        assert "Current Status" not in instruction

    def test_system_instruction_is_deterministic(self, profile):
        assert build_system_instruction(profile) == build_system_instruction(profile)

    def test_system_instruction_with_latest_stats(self, profile):
        stats = ProgressEntry(date="Oct 19", weight=69.4, workout_completed=True)
        instruction = build_system_instruction(profile, stats)
        assert "Current Status (as of Oct 19):" in instruction
        assert "- Weight: 69.4kg" in instruction
        assert "- Last Workout Completed: Yes" in instruction

    def test_greeting_mentions_name_and_goal(self, profile):
        greeting = build_greeting(profile)
        assert greeting.startswith("Hi Alex! I'm FitBot.")
        assert "**weight loss**" in greeting

    def test_greeting_humanizes_goal(self, profile):
        other = profile.model_copy(update={"goal": "general_fitness"})
        assert "**general fitness**" in build_greeting(other)


class TestHistoryMapping:
    """Tests for chat message to provider turn mapping."""

    def test_one_turn_per_message_in_order(self):
        messages = [
            ChatMessage(role="model", text="Hi!"),
            ChatMessage(role="user", text="Plan?"),
            ChatMessage(role="model", text="Sure."),
        ]
        history = to_external_history(messages)
        assert [(m.role, m.content) for m in history] == [
            ("model", "Hi!"), ("user", "Plan?"), ("model", "Sure.")
        ]

    def test_empty_history(self):
        assert to_external_history([]) == []


class TestConversationAdapter:
    """Tests for ConversationAdapter."""

    def test_open_session_without_provider_raises(self, profile):
        adapter = ConversationAdapter()
        assert adapter.is_configured is False
        with pytest.raises(ConversationConnectionError):
            adapter.open_session("s1", profile, [])

    def test_open_session_seeds_history(self, profile, scripted_provider):
        adapter = ConversationAdapter(scripted_provider())
        greeting = ChatMessage(role="model", text="Hi Alex!")
        handle = adapter.open_session("s1", profile, [greeting])
        assert handle.session_id == "s1"
        assert handle.history == [LLMMessage.text("model", "Hi Alex!")]
        assert "- Name: Alex" in handle.system_instruction

    def test_open_session_does_not_call_provider(self, profile, scripted_provider):
        provider = scripted_provider(fragments=["unused"])
        ConversationAdapter(provider).open_session("s1", profile, [])
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_send_streams_and_extends_history(self, profile, scripted_provider):
        provider = scripted_provider(fragments=["Sure", ", here", "'s a plan"])
        adapter = ConversationAdapter(provider, temperature=0.3)
        handle = adapter.open_session("s1", profile, [ChatMessage(role="model", text="Hi!")])

        fragments = [f async for f in adapter.send(handle, "Give me a plan")]

        assert fragments == ["Sure", ", here", "'s a plan"]
        sent = provider.calls[0]
        assert [m.content for m in sent["messages"]] == ["Hi!", "Give me a plan"]
        assert sent["system_instruction"] == handle.system_instruction
        assert sent["temperature"] == 0.3
        assert handle.history[-2:] == [
            LLMMessage.text("user", "Give me a plan"),
            LLMMessage.text("model", "Sure, here's a plan"),
        ]

    @pytest.mark.asyncio
    async def test_error_before_first_fragment_is_connection_error(self, profile, scripted_provider):
        provider = scripted_provider(fragments=["never"], error=httpx.ConnectError("refused"))
        adapter = ConversationAdapter(provider)
        handle = adapter.open_session("s1", profile, [])

        with pytest.raises(ConversationConnectionError):
            async for _ in adapter.send(handle, "hello"):
                pass
        assert handle.history == []

    @pytest.mark.asyncio
    async def test_error_after_fragment_is_stream_interrupted(self, profile, scripted_provider):
        provider = scripted_provider(
            fragments=["Part", "never"], error=httpx.ReadError("reset"), error_after=1
        )
        adapter = ConversationAdapter(provider)
        handle = adapter.open_session("s1", profile, [])

        received = []
        with pytest.raises(StreamInterrupted):
            async for fragment in adapter.send(handle, "hello"):
                received.append(fragment)
        assert received == ["Part"]
        assert handle.history == []

    @pytest.mark.asyncio
    async def test_unexpected_error_after_fragment_is_stream_interrupted(
        self, profile, scripted_provider
    ):
        provider = scripted_provider(
            fragments=["Sure", "never"], error=ValueError("bad chunk"), error_after=1
        )
        adapter = ConversationAdapter(provider)
        handle = adapter.open_session("s1", profile, [])

        received = []
        with pytest.raises(StreamInterrupted) as exc_info:
            async for fragment in adapter.send(handle, "hello"):
                received.append(fragment)
        assert received == ["Sure"]
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert handle.history == []

    @pytest.mark.asyncio
    async def test_unexpected_error_before_fragment_is_connection_error(
        self, profile, scripted_provider
    ):
        provider = scripted_provider(fragments=["never"], error=ValueError("bad request"))
        adapter = ConversationAdapter(provider)
        handle = adapter.open_session("s1", profile, [])

        with pytest.raises(ConversationConnectionError):
            async for _ in adapter.send(handle, "hello"):
                pass

    @pytest.mark.asyncio
    async def test_provider_interruption_passes_through(self, profile, scripted_provider):
        provider = scripted_provider(
            fragments=["a"], error=StreamInterrupted("no finish reason"), error_after=1
        )
        adapter = ConversationAdapter(provider)
        handle = adapter.open_session("s1", profile, [])

        with pytest.raises(StreamInterrupted, match="no finish reason"):
            async for _ in adapter.send(handle, "hello"):
                pass

    @pytest.mark.asyncio
    async def test_closing_early_stops_provider(self, profile, scripted_provider):
        provider = scripted_provider(fragments=["one", "two", "three"])
        adapter = ConversationAdapter(provider)
        handle = adapter.open_session("s1", profile, [])

        stream = adapter.send(handle, "hello")
        assert await stream.__anext__() == "one"
        await stream.aclose()

        assert provider.yielded == 1
        assert handle.history == []

    @pytest.mark.asyncio
    async def test_send_without_provider_raises(self):
        adapter = ConversationAdapter()
        handle = ConversationHandle(session_id="s1", system_instruction="x")
        with pytest.raises(ConversationConnectionError):
            async for _ in adapter.send(handle, "hello"):
                pass
