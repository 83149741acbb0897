from chore_prefs.database import check_database_health, create_db_engine


def test_explicit_url_needs_no_environment(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)

    engine = create_db_engine("sqlite://")

    assert engine.url.drivername == "sqlite"
    assert engine.echo is False
    engine.dispose()


def test_explicit_echo_is_kept(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)

    engine = create_db_engine("sqlite://", echo=True)

    assert engine.echo is True
    engine.dispose()


def test_health_check(session_factory, broken_session_factory):
    assert check_database_health(session_factory) is True
    assert check_database_health(broken_session_factory) is False
