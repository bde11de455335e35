"""
Chat view - message list, suggestion chips and input state.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..models import ChatMessage, ChatSession

SUGGESTIONS = [
    "Give me a 20-min workout",
    "High protein vegetarian meal?",
    "How to improve my squat form?",
    "I missed my workout yesterday",
]
SUGGESTION_LIMIT = 3


@dataclass
class ChatViewState:
    messages: List[ChatMessage] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    input_enabled: bool = False
    show_typing_indicator: bool = False


def chat_view(session: Optional[ChatSession], is_streaming: bool) -> ChatViewState:
    """Render state for the chat screen. No session means an empty, disabled view."""
    if session is None:
        return ChatViewState()
    messages = list(session.messages)
    return ChatViewState(
        messages=messages,
        suggestions=SUGGESTIONS if len(messages) < SUGGESTION_LIMIT else [],
        input_enabled=not is_streaming,
        show_typing_indicator=is_streaming,
    )
