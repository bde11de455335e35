"""LLM module - provides a unified streaming interface for chat providers."""

from .base import (
    LLMProvider, LLMMessage,
    ConversationError, ConversationConnectionError, StreamInterrupted
)
from .gemini_provider import GeminiProvider
from .openai_provider import OpenAIProvider
from .factory import create_llm_provider

__all__ = [
    'LLMProvider',
    'LLMMessage',
    'ConversationError',
    'ConversationConnectionError',
    'StreamInterrupted',
    'GeminiProvider',
    'OpenAIProvider',
    'create_llm_provider',
]
