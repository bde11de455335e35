"""
Progress Model - One dated weight/workout observation.
"""

from typing import List, Optional
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class ProgressEntry(BaseModel):
    """Progress entry keyed by day (e.g. "Oct 19")."""
    date: str
    weight: float  # kg
    calories_burned: Optional[int] = None
    workout_completed: bool = False

    class Config:
        alias_generator = to_camel
        populate_by_name = True


def upsert_entry(entries: List[ProgressEntry], entry: ProgressEntry) -> List[ProgressEntry]:
    """
    Insert ``entry`` or replace the existing entry with the same date.

    Returns a new list; a replaced entry keeps its position.
    """
    updated = list(entries)
    for index, existing in enumerate(updated):
        if existing.date == entry.date:
            updated[index] = entry
            return updated
    updated.append(entry)
    return updated
