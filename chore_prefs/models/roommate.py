"""Roommate identity model."""

from dataclasses import dataclass

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class Roommate(Base, TimestampMixin):
    """A uniquely named household member.

    Created the first time someone submits preferences under a name and
    never deleted by the preference form.
    """

    __tablename__ = "roommates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    preferences: Mapped[list["Preference"]] = relationship(
        "Preference", back_populates="roommate"
    )

    def __repr__(self) -> str:
        return f"<Roommate(id={self.id}, name='{self.name}')>"


@dataclass(frozen=True)
class RoommateRecord:
    """Detached snapshot of a roommate row.

    Two records for the same roommate compare equal even when they come
    from different lookups.
    """

    id: int
    name: str

    @classmethod
    def from_model(cls, roommate: Roommate) -> "RoommateRecord":
        return cls(id=roommate.id, name=roommate.name)
