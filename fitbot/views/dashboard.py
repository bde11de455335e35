"""
Dashboard view - progress summary and chart series.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from ..models import ProgressEntry, UserProfile


@dataclass
class DashboardStats:
    start_weight: float
    current_weight: float
    weight_diff: float
    total_workouts: int

    @property
    def trending_down(self) -> bool:
        return self.weight_diff <= 0


def dashboard_stats(profile: UserProfile, progress: List[ProgressEntry]) -> DashboardStats:
    """Summary cards; an empty history falls back to the profile weight."""
    start = (progress[0].weight if progress else None) or profile.weight
    current = (progress[-1].weight if progress else None) or profile.weight
    return DashboardStats(
        start_weight=start,
        current_weight=current,
        weight_diff=round(current - start, 2),
        total_workouts=sum(1 for entry in progress if entry.workout_completed),
    )


def chart_series(progress: List[ProgressEntry]) -> Dict[str, List[Optional[float]]]:
    """Parallel lists for the weight line chart and the calories bar chart."""
    return {
        "dates": [entry.date for entry in progress],
        "weight": [round(entry.weight, 1) for entry in progress],
        "calories_burned": [entry.calories_burned or 0 for entry in progress],
    }
