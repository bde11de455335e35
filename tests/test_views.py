"""
Tests for the view-state helpers.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from fitbot.models import ChatMessage, ChatSession, ProgressEntry, UserProfile
from fitbot.views import (
    SUGGESTIONS, LoginForm, OnboardingForm, chart_series, chat_view,
    dashboard_stats, history_items
)


class TestLoginForm:
    """Tests for the sign-in form."""

    def test_cannot_submit_incomplete(self):
        assert LoginForm(email="a@b.com").can_submit is False
        assert LoginForm(email="  ", password="x").can_submit is False

    def test_submit_label(self):
        assert LoginForm().submit_label == "Sign In"
        assert LoginForm(is_sign_up=True).submit_label == "Create Account"

    @pytest.mark.asyncio
    async def test_submit_logs_in(self):
        app = MagicMock()
        app.login = AsyncMock()
        form = LoginForm(email=" alex@example.com ", password="secret")
        assert await form.submit(app) is True
        app.login.assert_awaited_once_with("alex@example.com")

    @pytest.mark.asyncio
    async def test_submit_incomplete_does_nothing(self):
        app = MagicMock()
        app.login = AsyncMock()
        assert await LoginForm(email="alex@example.com").submit(app) is False
        app.login.assert_not_awaited()


class TestOnboardingForm:
    """Tests for the three-step questionnaire."""

    def test_defaults(self):
        form = OnboardingForm()
        assert form.title == "The Basics"
        assert form.progress_label == "Step 1/3"
        assert form.data["weight"] == 70

    def test_name_required_on_first_step(self):
        form = OnboardingForm()
        assert form.advance() is None
        assert form.step == 0

    def test_numeric_input_falls_back(self):
        form = OnboardingForm()
        form.update("weight", "abc")
        form.update("age", "31")
        assert form.data["weight"] == 70
        assert form.data["age"] == 31

    def test_invalid_choice_rejected(self):
        form = OnboardingForm()
        with pytest.raises(ValueError):
            form.update("goal", "get_huge")
        with pytest.raises(ValueError):
            form.update("favourite_colour", "blue")

    def test_completes_profile(self):
        form = OnboardingForm()
        form.update("name", "  Alex ")
        assert form.advance() is None
        form.update("goal", "muscle_gain")
        assert form.advance() is None
        assert form.is_last_step
        form.update("equipment", "gym")

        profile = form.advance()

        assert profile == UserProfile(
            name="Alex", age=25, weight=70, height=170,
            goal="muscle_gain", experience="beginner", equipment="gym"
        )


class TestDashboard:
    """Tests for dashboard stats and chart series."""

    def test_stats_from_history(self, profile):
        progress = [
            ProgressEntry(date="Oct 17", weight=70.1, calories_burned=350, workout_completed=True),
            ProgressEntry(date="Oct 18", weight=69.8, calories_burned=0),
            ProgressEntry(date="Oct 19", weight=69.4, calories_burned=410, workout_completed=True),
        ]
        stats = dashboard_stats(profile, progress)
        assert stats.start_weight == 70.1
        assert stats.current_weight == 69.4
        assert stats.weight_diff == -0.7
        assert stats.total_workouts == 2
        assert stats.trending_down is True

    def test_stats_without_history(self, profile):
        stats = dashboard_stats(profile, [])
        assert stats.start_weight == stats.current_weight == 70
        assert stats.weight_diff == 0
        assert stats.total_workouts == 0

    def test_chart_series(self):
        progress = [
            ProgressEntry(date="Oct 18", weight=70.04),
            ProgressEntry(date="Oct 19", weight=69.96, calories_burned=320),
        ]
        assert chart_series(progress) == {
            "dates": ["Oct 18", "Oct 19"],
            "weight": [70.0, 70.0],
            "calories_burned": [0, 320],
        }


class TestChatView:
    """Tests for chat screen state."""

    def test_no_session(self):
        state = chat_view(None, is_streaming=False)
        assert state.messages == []
        assert state.input_enabled is False

    def test_suggestions_for_short_conversation(self):
        session = ChatSession(id="s1", messages=[ChatMessage(role="model", text="Hi!")])
        state = chat_view(session, is_streaming=False)
        assert state.suggestions == SUGGESTIONS
        assert state.input_enabled is True
        assert state.show_typing_indicator is False

    def test_streaming_disables_input(self):
        session = ChatSession(id="s1", messages=[
            ChatMessage(role="model", text="Hi!"),
            ChatMessage(role="user", text="Plan?"),
            ChatMessage(role="model", text=""),
        ])
        state = chat_view(session, is_streaming=True)
        assert state.suggestions == []
        assert state.input_enabled is False
        assert state.show_typing_indicator is True


class TestHistory:
    """Tests for the session history list."""

    def test_newest_first_with_active_flag(self):
        sessions = [
            ChatSession(id="old", title="Leg day", created_at=1718452800000),
            ChatSession(id="new", created_at=1718539200000,
                        messages=[ChatMessage(role="model", text="Hi!")]),
        ]
        items = history_items(sessions, "old")
        assert [item.session_id for item in items] == ["new", "old"]
        assert items[0].message_count == 1
        assert items[1].title == "Leg day"
        assert items[1].created == "Jun 15, 2024"
        assert [item.is_active for item in items] == [False, True]
