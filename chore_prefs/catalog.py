"""Chore catalog loading."""

import logging
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .database import get_db_session
from .errors import RemoteLookupError
from .models import Chore, ChoreRecord

logger = logging.getLogger(__name__)


def load_chores(session_factory: sessionmaker | None = None) -> list[ChoreRecord]:
    """Fetch the full chore catalog, ordered by id.

    Raises:
        RemoteLookupError: If the store cannot be read.
    """
    try:
        with get_db_session(session_factory) as db:
            chores = db.query(Chore).order_by(Chore.id).all()
            records = [ChoreRecord.from_model(chore) for chore in chores]
    except SQLAlchemyError as e:
        logger.exception(f"Error fetching chores: {e}")
        raise RemoteLookupError("Failed to load chore catalog") from e

    logger.info(f"Loaded {len(records)} chores")
    return records


def seed_chores(names: Iterable[str], session_factory: sessionmaker | None = None) -> int:
    """Insert catalog entries that do not exist yet.

    Returns:
        Number of chores inserted.
    """
    wanted = []
    for name in names:
        name = name.strip()
        if name and name not in wanted:
            wanted.append(name)
    if not wanted:
        return 0

    with get_db_session(session_factory) as db:
        existing = {
            row.name for row in db.query(Chore).filter(Chore.name.in_(wanted)).all()
        }
        missing = [name for name in wanted if name not in existing]
        for name in missing:
            db.add(Chore(name=name))

    if missing:
        logger.info(f"Seeded chores: {', '.join(missing)}")
    return len(missing)
