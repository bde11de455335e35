"""
LLM Provider Base - Abstract base for streaming chat providers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncGenerator, Dict, List, Optional


class ConversationError(Exception):
    """Base class for failures talking to the conversational service."""


class ConversationConnectionError(ConversationError):
    """The service is unreachable, rejected the request, or no credential is configured."""


class StreamInterrupted(ConversationError):
    """The fragment stream ended abnormally part-way through a reply."""


@dataclass
class LLMMessage:
    """
    One conversation turn.
    Roles follow the chat history: "user" or "model".
    """
    role: str
    content: str

    @staticmethod
    def text(role: str, text: str) -> "LLMMessage":
        """Create a text message."""
        return LLMMessage(role=role, content=text)


class LLMProvider(ABC):
    """
    Abstract base class for LLM API providers.
    All providers must implement chat_completion_stream.
    """

    name = "base"

    def __init__(self, api_key: str, model: str, base_url: Optional[str] = None,
                 default_temperature: float = 0.7, default_max_tokens: int = 2048,
                 timeout: float = 120.0):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens
        self.timeout = timeout

    @abstractmethod
    async def chat_completion_stream(
        self,
        messages: List[LLMMessage],
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AsyncGenerator[str, None]:
        """
        Stream a reply to ``messages``.

        Args:
            messages: Conversation history ending with the new user turn
            system_instruction: Optional system prompt
            temperature: Sampling temperature override
            max_tokens: Max tokens override

        Yields:
            str: Text fragments in arrival order

        Raises:
            httpx.HTTPError: transport or status failures
            StreamInterrupted: the service closed the stream without finishing
        """
        pass

    def describe(self) -> Dict[str, Any]:
        """Provider configuration for logs (pass through filter_sensitive_data)."""
        return {
            "provider": self.name,
            "model": self.model,
            "base_url": self.base_url,
            "api_key": self.api_key,
            "temperature": self.default_temperature,
        }
