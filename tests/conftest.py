import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from chore_prefs.catalog import load_chores, seed_chores
from chore_prefs.models import Base


@pytest.fixture
def engine():
    # One shared in-memory connection, usable from asyncio.to_thread workers
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def catalog(session_factory):
    seed_chores(["Dishes", "Trash"], session_factory)
    return load_chores(session_factory)


class BrokenSession:
    """Session stand-in whose every query fails like a dropped connection."""

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    query = execute = add = flush = get_bind = _fail

    def commit(self):
        pass

    def rollback(self):
        pass

    def close(self):
        pass


@pytest.fixture
def broken_session_factory():
    return BrokenSession
