"""
Shared test fixtures and configuration.
"""

import os
import random

import pytest

# Set test environment variables before importing app modules
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/fitbot_test_data")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LLM_PROVIDER", "gemini")

from fitbot.agents import ConversationAdapter  # noqa: E402
from fitbot.core import SessionManager  # noqa: E402
from fitbot.llm.base import LLMProvider  # noqa: E402
from fitbot.models import UserProfile  # noqa: E402
from fitbot.storage import LocalStorage, LocalStore  # noqa: E402


class ScriptedProvider(LLMProvider):
    """LLM provider that replays fixed fragments, optionally failing part-way."""

    name = "scripted"

    def __init__(self, fragments=None, error=None, error_after=0, on_fragment=None):
        super().__init__(api_key="test-key", model="scripted")
        self.fragments = list(fragments or [])
        self.error = error
        self.error_after = error_after
        self.on_fragment = on_fragment
        self.calls = []
        self.yielded = 0

    async def chat_completion_stream(self, messages, system_instruction=None,
                                     temperature=None, max_tokens=None):
        self.calls.append({
            "messages": list(messages),
            "system_instruction": system_instruction,
            "temperature": temperature,
        })
        for index, fragment in enumerate(self.fragments):
            if self.error is not None and index == self.error_after:
                raise self.error
            self.yielded += 1
            yield fragment
            if self.on_fragment is not None:
                self.on_fragment(index)
        if self.error is not None and self.error_after >= len(self.fragments):
            raise self.error


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def scripted_provider():
    return ScriptedProvider


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "data"))


@pytest.fixture
def store(storage):
    return LocalStore(storage)


@pytest.fixture
def profile():
    return UserProfile(
        name="Alex",
        age=30,
        weight=70,
        height=175,
        goal="weight_loss",
        experience="beginner",
        equipment="bodyweight",
    )


@pytest.fixture
def make_manager(store):
    """Build a SessionManager over the temp store with an optional provider."""
    def _make(provider=None):
        return SessionManager(store, ConversationAdapter(provider), rng=random.Random(7))
    return _make
