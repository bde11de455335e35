"""Views module - presentation state derived from the session manager."""

from .login import LoginForm
from .onboarding import OnboardingForm, STEPS
from .dashboard import DashboardStats, dashboard_stats, chart_series
from .chat import ChatViewState, chat_view, SUGGESTIONS
from .history import HistoryItem, history_items

__all__ = [
    'LoginForm',
    'OnboardingForm', 'STEPS',
    'DashboardStats', 'dashboard_stats', 'chart_series',
    'ChatViewState', 'chat_view', 'SUGGESTIONS',
    'HistoryItem', 'history_items',
]
