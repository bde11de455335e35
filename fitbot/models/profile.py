"""
Profile Model - Baseline attributes collected during onboarding.
"""

from typing import Literal
from pydantic import BaseModel, Field

Goal = Literal['weight_loss', 'muscle_gain', 'endurance', 'general_fitness']
Experience = Literal['beginner', 'intermediate', 'advanced']
Equipment = Literal['gym', 'home_dumbbells', 'bodyweight', 'resistance_bands']


class UserProfile(BaseModel):
    """The single current user profile used to personalize coaching."""
    name: str = Field(..., min_length=1)
    age: int
    weight: float  # kg
    height: float  # cm
    goal: Goal
    experience: Experience
    equipment: Equipment
