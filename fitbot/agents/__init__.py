"""Agents module - the coach conversation adapter and its prompts."""

from .conversation import ConversationAdapter, ConversationHandle, to_external_history
from .prompts import build_system_instruction, build_greeting

__all__ = [
    'ConversationAdapter',
    'ConversationHandle',
    'to_external_history',
    'build_system_instruction',
    'build_greeting',
]
