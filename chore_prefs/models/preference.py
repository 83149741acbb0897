"""Preference model linking a roommate to a chore score."""

from sqlalchemy import CheckConstraint, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

# Conflict target for the preference upsert
PREFERENCE_KEY = ("roommate_id", "chore_id")


class Preference(Base, TimestampMixin):
    """How much a roommate likes (or tolerates) a chore, scored 1-5.

    There is at most one row per (roommate, chore); writes go through an
    upsert keyed on that pair.
    """

    __tablename__ = "preferences"
    __table_args__ = (
        UniqueConstraint(*PREFERENCE_KEY, name="uq_preferences_roommate_chore"),
        CheckConstraint(
            "preference_score BETWEEN 1 AND 5", name="ck_preferences_score_range"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    roommate_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("roommates.id"), nullable=False
    )
    chore_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("chores.id"), nullable=False
    )
    preference_score: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Relationships
    roommate: Mapped["Roommate"] = relationship("Roommate", back_populates="preferences")
    chore: Mapped["Chore"] = relationship("Chore", back_populates="preferences")

    def __repr__(self) -> str:
        return (
            f"<Preference(roommate_id={self.roommate_id}, chore_id={self.chore_id}, "
            f"score={self.preference_score})>"
        )
