"""Reading and writing a roommate's chore scores.

Scores are stored one row per (roommate, chore). Saving always writes a row
for every chore in the catalog so a roommate's set is never partial.
"""

import logging
from typing import Iterable, Mapping

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .database import get_db_session
from .errors import InvalidScoreError, RemoteLookupError, RemoteWriteError
from .models import ChoreRecord, Preference, PREFERENCE_KEY, utcnow

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 5
DEFAULT_SCORE = 1

# Dialects with INSERT ... ON CONFLICT support
UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def default_score() -> int:
    """Score used for any chore a roommate has not rated."""
    return DEFAULT_SCORE


def validate_score(score) -> int:
    """Return the score if it is an integer from 1 to 5.

    Raises:
        InvalidScoreError: For anything else, including booleans.
    """
    if isinstance(score, bool) or not isinstance(score, int):
        raise InvalidScoreError(f"Score must be an integer, got {score!r}")
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise InvalidScoreError(
            f"Score must be between {MIN_SCORE} and {MAX_SCORE}, got {score}"
        )
    return score


def fill_defaults(catalog: Iterable[ChoreRecord], scores: Mapping[int, int]) -> dict[int, int]:
    """Return one score per catalog chore, defaulting the unrated ones."""
    return {chore.id: scores.get(chore.id, default_score()) for chore in catalog}


def build_preference_rows(
    roommate_id: int, catalog: Iterable[ChoreRecord], scores: Mapping[int, int]
) -> list[dict]:
    """Build one upsert row per catalog chore."""
    now = utcnow()
    return [
        {
            "roommate_id": roommate_id,
            "chore_id": chore_id,
            "preference_score": validate_score(score),
            "updated_at": now,
        }
        for chore_id, score in fill_defaults(catalog, scores).items()
    ]


def upsert_preferences(db_session: Session, rows: list[dict]) -> None:
    """Insert rows, overwriting the score of any (roommate, chore) already stored."""
    dialect = db_session.get_bind().dialect.name
    insert = UPSERT_INSERTS.get(dialect)
    if insert is None:
        raise RemoteWriteError(f"Preference upsert is not supported on {dialect}")

    stmt = insert(Preference).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=list(PREFERENCE_KEY),
        set_={
            "preference_score": stmt.excluded.preference_score,
            "updated_at": stmt.excluded.updated_at,
        },
    )
    db_session.execute(stmt)


class PreferenceStore:
    """Loads and saves chore scores through a session factory."""

    def __init__(self, session_factory: sessionmaker | None = None):
        self._session_factory = session_factory

    def load_preferences(self, roommate_id: int | None) -> dict[int, int]:
        """Return the stored chore_id -> score map for a roommate.

        Returns an empty map when roommate_id is None or nothing is stored.

        Raises:
            RemoteLookupError: If the store cannot be read.
        """
        if roommate_id is None:
            return {}

        try:
            with get_db_session(self._session_factory) as db:
                rows = (
                    db.query(Preference.chore_id, Preference.preference_score)
                    .filter(Preference.roommate_id == roommate_id)
                    .all()
                )
        except SQLAlchemyError as e:
            logger.error(f"Error fetching preferences for roommate {roommate_id}: {e}")
            raise RemoteLookupError(
                f"Failed to load preferences for roommate {roommate_id}"
            ) from e

        return {chore_id: score for chore_id, score in rows}

    def save_preferences(
        self,
        roommate_id: int,
        catalog: Iterable[ChoreRecord],
        scores: Mapping[int, int],
    ) -> int:
        """Write a score for every catalog chore in one batched upsert.

        Args:
            roommate_id: Roommate the scores belong to.
            catalog: Every chore that must end up with a row.
            scores: Scores set in the form; missing chores get the default.

        Returns:
            Number of rows written.

        Raises:
            InvalidScoreError: If any score is out of range.
            RemoteWriteError: If the upsert fails. Nothing is committed.
        """
        rows = build_preference_rows(roommate_id, catalog, scores)
        if not rows:
            logger.info(f"No chores to save for roommate {roommate_id}")
            return 0

        try:
            with get_db_session(self._session_factory) as db:
                upsert_preferences(db, rows)
        except SQLAlchemyError as e:
            logger.exception(f"Error saving preferences for roommate {roommate_id}: {e}")
            raise RemoteWriteError(
                f"Failed to save preferences for roommate {roommate_id}"
            ) from e

        logger.info(f"Saved {len(rows)} preferences for roommate {roommate_id}")
        return len(rows)
