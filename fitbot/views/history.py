"""
History view - list of chat sessions, newest first.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ..models import ChatSession


@dataclass
class HistoryItem:
    session_id: str
    title: str
    message_count: int
    created: str
    is_active: bool


def history_items(sessions: List[ChatSession], current_session_id: Optional[str]) -> List[HistoryItem]:
    return [
        HistoryItem(
            session_id=session.id,
            title=session.title,
            message_count=len(session.messages),
            created=datetime.fromtimestamp(session.created_at / 1000).strftime("%b %d, %Y"),
            is_active=session.id == current_session_id,
        )
        for session in reversed(sessions)
    ]
