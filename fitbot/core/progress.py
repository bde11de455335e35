"""
Progress helpers - date keys, form-input parsing and the seeded starter history.
"""

import math
import random
from datetime import date, timedelta
from typing import List, Optional

from ..models import ProgressEntry

SEED_DAYS = 7


def format_entry_date(day: date) -> str:
    """Day key in the short en-US form used for charts, e.g. "Oct 19"."""
    return f"{day.strftime('%b')} {day.day}"


def parse_float(raw: str, fallback: float) -> float:
    """Parse a numeric form field; blank, malformed, zero or non-finite input yields ``fallback``."""
    try:
        value = float(str(raw).strip())
    except ValueError:
        return fallback
    if not math.isfinite(value) or value == 0:
        return fallback
    return value


def parse_int(raw: str, fallback: int) -> int:
    """Integer variant of :func:`parse_float`; decimals are truncated."""
    value = parse_float(raw, float(fallback))
    return int(value)


def build_progress_entry(
    weight_input: str,
    calories_input: str,
    workout_done: bool,
    current_weight: float,
    today: Optional[date] = None
) -> ProgressEntry:
    """
    Turn raw dashboard form input into a progress entry for today.

    Invalid weight falls back to ``current_weight`` and invalid calories to 0
    instead of rejecting the entry.
    """
    return ProgressEntry(
        date=format_entry_date(today or date.today()),
        weight=parse_float(weight_input, current_weight),
        calories_burned=parse_int(calories_input, 0),
        workout_completed=workout_done
    )


def mock_initial_history(
    start_weight: float,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None
) -> List[ProgressEntry]:
    """
    Build a week of plausible entries ending today so new users don't see empty charts.

    Weights fluctuate by at most 0.25 kg around ``start_weight``. Every other
    day (starting six days ago) is a workout day burning 300-499 kcal.
    """
    today = today or date.today()
    rng = rng or random.Random()

    entries = []
    for i in range(SEED_DAYS):
        day = today - timedelta(days=SEED_DAYS - 1 - i)
        workout = i % 2 == 0
        entries.append(ProgressEntry(
            date=format_entry_date(day),
            weight=start_weight + (rng.random() * 0.5 - 0.25),
            calories_burned=300 + rng.randrange(200) if workout else 0,
            workout_completed=workout
        ))
    return entries
