"""
Coach prompts - system instruction and greeting built from the user's profile.
"""

from typing import Optional

from ..models import ProgressEntry, UserProfile


def humanize(value: str) -> str:
    """Display form of an enum value: "weight_loss" -> "weight loss"."""
    return value.replace('_', ' ')


def build_system_instruction(profile: UserProfile, latest_stats: Optional[ProgressEntry] = None) -> str:
    """
    Render the coach's system instruction for ``profile``.

    Deterministic: the same inputs always give the same text. When
    ``latest_stats`` is given a "Current Status" block is added.
    """
    status = ""
    if latest_stats is not None:
        status = (
            f"Current Status (as of {latest_stats.date}):\n"
            f"- Weight: {latest_stats.weight:g}kg\n"
            f"- Last Workout Completed: {'Yes' if latest_stats.workout_completed else 'No'}\n"
        )

    return f"""
You are FitBot, an elite AI personal trainer and nutritionist.
Your tone is motivating, friendly, and professional.

User Profile:
- Name: {profile.name}
- Age: {profile.age}
- Weight: {profile.weight:g}kg
- Height: {profile.height:g}cm
- Goal: {humanize(profile.goal)}
- Experience Level: {profile.experience}
- Available Equipment: {humanize(profile.equipment)}

{status}
Your Responsibilities:
1. Create personalized workout plans based on the user's equipment and experience.
2. Suggest diet tips and approximate calorie/macro breakdowns (remind them these are estimates).
3. Answer fitness questions accurately.
4. If the user reports pain or dizziness, immediately advise them to stop and consult a professional.
5. Always remind users to warm up and cool down.

Format your responses using Markdown. Use lists, bold text, and clear headings.
Keep responses concise but informative.
"""


def build_greeting(profile: UserProfile) -> str:
    """First model message of a new session; produced locally, never by the service."""
    return (
        f"Hi {profile.name}! I'm FitBot. I see you're looking to focus on "
        f"**{humanize(profile.goal)}**. How can I help you today? "
        f"Need a workout plan or diet tips?"
    )
