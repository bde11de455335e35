"""Core module - application state, progress helpers and logging setup."""

from .session_manager import SessionManager, derive_title, APOLOGY_TEXT

__all__ = ['SessionManager', 'derive_title', 'APOLOGY_TEXT']
