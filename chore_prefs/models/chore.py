"""Chore catalog model."""

from dataclasses import dataclass

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class Chore(Base, TimestampMixin):
    """One household chore that roommates rate.

    The catalog is read-only for the preference form; rows are added by
    seeding or by hand.
    """

    __tablename__ = "chores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    preferences: Mapped[list["Preference"]] = relationship(
        "Preference", back_populates="chore"
    )

    def __repr__(self) -> str:
        return f"<Chore(id={self.id}, name='{self.name}')>"


@dataclass(frozen=True)
class ChoreRecord:
    """Detached snapshot of a chore row."""

    id: int
    name: str

    @classmethod
    def from_model(cls, chore: Chore) -> "ChoreRecord":
        return cls(id=chore.id, name=chore.name)
