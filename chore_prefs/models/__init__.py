"""Database models for the chore preference form."""

from .base import Base, TimestampMixin, utcnow
from .chore import Chore, ChoreRecord
from .roommate import Roommate, RoommateRecord
from .preference import Preference, PREFERENCE_KEY

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "utcnow",
    # Models
    "Chore",
    "Roommate",
    "Preference",
    "PREFERENCE_KEY",
    # Detached records
    "ChoreRecord",
    "RoommateRecord",
]
