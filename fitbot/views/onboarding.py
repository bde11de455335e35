"""
Onboarding view - three-step profile questionnaire.
"""

from typing import Any, Dict, List, Optional, Tuple

from ..core.progress import parse_float, parse_int
from ..models import UserProfile

STEPS: List[Tuple[str, str]] = [
    ("basics", "The Basics"),
    ("goal", "Your Goal"),
    ("details", "Experience & Gear"),
]

GOAL_OPTIONS = ['weight_loss', 'muscle_gain', 'endurance', 'general_fitness']
EXPERIENCE_OPTIONS = ['beginner', 'intermediate', 'advanced']
EQUIPMENT_OPTIONS = ['bodyweight', 'home_dumbbells', 'gym', 'resistance_bands']

_NUMERIC_FIELDS = {"age": parse_int, "weight": parse_float, "height": parse_float}
_CHOICE_FIELDS = {
    "goal": GOAL_OPTIONS,
    "experience": EXPERIENCE_OPTIONS,
    "equipment": EQUIPMENT_OPTIONS,
}


class OnboardingForm:
    """
    Collects a UserProfile over three steps.

    Numeric fields keep their previous value when the input does not parse.
    """

    def __init__(self):
        self.step = 0
        self.data: Dict[str, Any] = {
            "name": "",
            "age": 25,
            "weight": 70,
            "height": 170,
            "goal": "weight_loss",
            "experience": "beginner",
            "equipment": "bodyweight",
        }

    @property
    def title(self) -> str:
        return STEPS[self.step][1]

    @property
    def progress_label(self) -> str:
        return f"Step {self.step + 1}/{len(STEPS)}"

    @property
    def is_last_step(self) -> bool:
        return self.step == len(STEPS) - 1

    @property
    def can_advance(self) -> bool:
        return self.step != 0 or bool(str(self.data["name"]).strip())

    def update(self, field: str, raw: Any) -> None:
        """
        Set a form field from raw input.

        Raises:
            ValueError: For an unknown field or an option outside the allowed choices
        """
        if field == "name":
            self.data["name"] = str(raw)
        elif field in _NUMERIC_FIELDS:
            self.data[field] = _NUMERIC_FIELDS[field](raw, self.data[field])
        elif field in _CHOICE_FIELDS:
            if raw not in _CHOICE_FIELDS[field]:
                raise ValueError(f"Invalid {field}: {raw}")
            self.data[field] = raw
        else:
            raise ValueError(f"Unknown onboarding field: {field}")

    def advance(self) -> Optional[UserProfile]:
        """Move to the next step; after the last step return the finished profile."""
        if not self.can_advance:
            return None
        if not self.is_last_step:
            self.step += 1
            return None
        return UserProfile(**{**self.data, "name": self.data["name"].strip()})
