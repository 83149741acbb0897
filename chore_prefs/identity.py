"""Roommate identity resolution.

Turns the free-text name typed into the form into a durable roommate
record. Lookups are exact matches on the trimmed name.
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .database import get_db_session
from .errors import InvalidNameError, RemoteLookupError, RemoteWriteError
from .models import Roommate, RoommateRecord

logger = logging.getLogger(__name__)


def find_roommate(db_session: Session, name: str) -> Roommate | None:
    """Look up a roommate by exact name. Names are unique, so 0 or 1 rows."""
    return db_session.query(Roommate).filter(Roommate.name == name).one_or_none()


class IdentityResolver:
    """Resolves names to roommates against the store behind a session factory."""

    def __init__(self, session_factory: sessionmaker | None = None):
        self._session_factory = session_factory

    def resolve(self, name: str) -> RoommateRecord | None:
        """Find the roommate registered under a name.

        Args:
            name: Name as typed; surrounding whitespace is ignored.

        Returns:
            The roommate, or None if the name is blank or nobody has it.

        Raises:
            RemoteLookupError: If the store cannot be read.
        """
        name = name.strip()
        if not name:
            return None

        try:
            with get_db_session(self._session_factory) as db:
                roommate = find_roommate(db, name)
                record = RoommateRecord.from_model(roommate) if roommate else None
        except SQLAlchemyError as e:
            logger.error(f"Error fetching roommate '{name}': {e}")
            raise RemoteLookupError(f"Failed to look up roommate '{name}'") from e

        if record is None:
            logger.info(f"No roommate named '{name}'")
        else:
            logger.info(f"Resolved roommate '{name}' (id={record.id})")
        return record

    def get_or_create(self, name: str) -> RoommateRecord:
        """Return the roommate for a name, inserting one if absent.

        Existence is re-checked right before the insert because the form's
        last resolution may be stale. If another writer inserts the same
        name between the check and the insert, the existing row is used.

        Raises:
            InvalidNameError: If the name is blank.
            RemoteWriteError: If the lookup or insert fails.
        """
        name = name.strip()
        if not name:
            raise InvalidNameError("Roommate name is required")

        try:
            return self._get_or_insert(name)
        except IntegrityError:
            logger.info(f"Roommate '{name}' was created concurrently, reusing it")
        except SQLAlchemyError as e:
            logger.exception(f"Error creating roommate '{name}': {e}")
            raise RemoteWriteError(f"Failed to create roommate '{name}'") from e

        try:
            with get_db_session(self._session_factory) as db:
                roommate = find_roommate(db, name)
                if roommate is None:
                    raise RemoteWriteError(f"Failed to create roommate '{name}'")
                return RoommateRecord.from_model(roommate)
        except SQLAlchemyError as e:
            logger.exception(f"Error re-reading roommate '{name}': {e}")
            raise RemoteWriteError(f"Failed to create roommate '{name}'") from e

    def _get_or_insert(self, name: str) -> RoommateRecord:
        with get_db_session(self._session_factory) as db:
            roommate = find_roommate(db, name)
            if roommate:
                return RoommateRecord.from_model(roommate)

            roommate = Roommate(name=name)
            db.add(roommate)
            db.flush()
            record = RoommateRecord.from_model(roommate)

        logger.info(f"Added roommate: {name} (id={record.id})")
        return record
