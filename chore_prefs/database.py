"""Database connection and session management."""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from .config import get_settings

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def create_db_engine(database_url: str | None = None, echo: bool | None = None) -> Engine:
    """Create SQLAlchemy engine with connection pooling."""
    if database_url is None:
        settings = get_settings()
        database_url = settings.database_url
        echo = settings.sql_echo if echo is None else echo
    elif echo is None:
        echo = False

    options = {"pool_pre_ping": True, "echo": echo}  # Verify connections before using
    if not database_url.startswith("sqlite"):
        options.update(pool_size=5, max_overflow=10)

    return create_engine(database_url, **options)


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def get_session_factory() -> sessionmaker:
    """Return the process-wide session factory bound to the engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _session_factory


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI endpoints that need a database session."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_session(session_factory: sessionmaker | None = None) -> Generator[Session, None, None]:
    """Context manager for database sessions.

    Commits on a clean exit and rolls back if the block raises.

    Usage:
        with get_db_session() as db:
            db.query(...)
    """
    db = (session_factory or get_session_factory())()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_database_health(session_factory: sessionmaker | None = None) -> bool:
    """Verify database connection is working.

    Returns:
        True if database is healthy, False otherwise.
    """
    try:
        with get_db_session(session_factory) as db:
            db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False


def dispose_engine() -> None:
    """Dispose of the engine and all connections.

    Call this during graceful shutdown.
    """
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
