"""
View Model - Screens the application can show.
"""

from enum import Enum


class AppView(str, Enum):
    LOGIN = "LOGIN"
    ONBOARDING = "ONBOARDING"
    DASHBOARD = "DASHBOARD"
    CHAT = "CHAT"
    HISTORY = "HISTORY"
