"""Models module."""

from .profile import UserProfile, Goal, Experience, Equipment
from .progress import ProgressEntry, upsert_entry
from .chat import ChatMessage, ChatSession, DEFAULT_SESSION_TITLE, new_id, now_ms
from .view import AppView

__all__ = [
    'UserProfile', 'Goal', 'Experience', 'Equipment',
    'ProgressEntry', 'upsert_entry',
    'ChatMessage', 'ChatSession', 'DEFAULT_SESSION_TITLE', 'new_id', 'now_ms',
    'AppView'
]
