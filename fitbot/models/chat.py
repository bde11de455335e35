"""
Chat Models - Defines structures for chat messages and sessions.
"""

import time
import uuid
from typing import List, Literal
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

DEFAULT_SESSION_TITLE = "New Conversation"


def now_ms() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)


def new_id() -> str:
    """Timestamp-derived id with a random suffix so ids minted in the same millisecond differ."""
    return f"{now_ms()}-{uuid.uuid4().hex[:8]}"


class ChatMessage(BaseModel):
    """Chat message model. ``text`` grows in place while a model reply streams."""
    id: str = Field(default_factory=new_id)
    role: Literal['user', 'model']
    text: str = ""
    timestamp: int = Field(default_factory=now_ms)


class ChatSession(BaseModel):
    """A titled conversation thread."""
    id: str
    title: str = DEFAULT_SESSION_TITLE
    created_at: int = Field(default_factory=now_ms)
    messages: List[ChatMessage] = Field(default_factory=list)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
