import pytest

from chore_prefs.errors import InvalidScoreError, RemoteLookupError, RemoteWriteError
from chore_prefs.identity import IdentityResolver
from chore_prefs.models import ChoreRecord, Preference
from chore_prefs.preference_store import (
    PreferenceStore,
    default_score,
    fill_defaults,
    validate_score,
)


def stored_rows(session_factory):
    with session_factory() as db:
        return sorted(
            (p.roommate_id, p.chore_id, p.preference_score)
            for p in db.query(Preference).all()
        )


def test_default_score_is_one():
    assert default_score() == 1


@pytest.mark.parametrize("score", [0, 6, -1, 2.5, "3", True, None])
def test_validate_score_rejects_out_of_range(score):
    with pytest.raises(InvalidScoreError):
        validate_score(score)


def test_fill_defaults_covers_every_chore():
    catalog = [ChoreRecord(1, "Dishes"), ChoreRecord(2, "Trash"), ChoreRecord(3, "Laundry")]

    assert fill_defaults(catalog, {2: 5, 99: 4}) == {1: 1, 2: 5, 3: 1}


def test_load_preferences_without_roommate_is_empty(session_factory):
    assert PreferenceStore(session_factory).load_preferences(None) == {}


def test_load_preferences_with_nothing_stored_is_empty(session_factory):
    roommate = IdentityResolver(session_factory).get_or_create("Alex")

    assert PreferenceStore(session_factory).load_preferences(roommate.id) == {}


def test_save_writes_one_row_per_chore_with_defaults(session_factory, catalog):
    """New roommate "Alex" rates Dishes 4 and leaves Trash unset."""
    dishes, trash = catalog
    alex = IdentityResolver(session_factory).get_or_create("Alex")
    store = PreferenceStore(session_factory)

    written = store.save_preferences(alex.id, catalog, {dishes.id: 4})

    assert written == len(catalog)
    assert stored_rows(session_factory) == [(alex.id, dishes.id, 4), (alex.id, trash.id, 1)]
    assert store.load_preferences(alex.id) == {dishes.id: 4, trash.id: 1}


def test_save_updates_existing_row_instead_of_duplicating(session_factory, catalog):
    dishes, trash = catalog
    alex = IdentityResolver(session_factory).get_or_create("Alex")
    store = PreferenceStore(session_factory)
    store.save_preferences(alex.id, catalog, {dishes.id: 2})

    store.save_preferences(alex.id, catalog, {dishes.id: 5})

    assert stored_rows(session_factory) == [(alex.id, dishes.id, 5), (alex.id, trash.id, 1)]


def test_save_keeps_roommates_separate(session_factory, catalog):
    dishes, _ = catalog
    resolver = IdentityResolver(session_factory)
    alex = resolver.get_or_create("Alex")
    sam = resolver.get_or_create("Sam")
    store = PreferenceStore(session_factory)

    store.save_preferences(alex.id, catalog, {dishes.id: 3})
    store.save_preferences(sam.id, catalog, {dishes.id: 5})

    assert store.load_preferences(alex.id)[dishes.id] == 3
    assert store.load_preferences(sam.id)[dishes.id] == 5
    assert len(stored_rows(session_factory)) == 4


def test_save_with_empty_catalog_writes_nothing(session_factory):
    alex = IdentityResolver(session_factory).get_or_create("Alex")

    assert PreferenceStore(session_factory).save_preferences(alex.id, [], {1: 3}) == 0
    assert stored_rows(session_factory) == []


def test_save_rejects_invalid_score_before_writing(session_factory, catalog):
    dishes, _ = catalog
    alex = IdentityResolver(session_factory).get_or_create("Alex")

    with pytest.raises(InvalidScoreError):
        PreferenceStore(session_factory).save_preferences(alex.id, catalog, {dishes.id: 9})
    assert stored_rows(session_factory) == []


def test_load_failure_raises_lookup_error(broken_session_factory):
    with pytest.raises(RemoteLookupError):
        PreferenceStore(broken_session_factory).load_preferences(7)


def test_save_failure_raises_single_write_error(broken_session_factory):
    catalog = [ChoreRecord(1, "Dishes"), ChoreRecord(2, "Trash")]

    with pytest.raises(RemoteWriteError):
        PreferenceStore(broken_session_factory).save_preferences(7, catalog, {1: 2})


def test_upsert_keeps_created_at_and_refreshes_updated_at(session_factory, catalog):
    dishes, _ = catalog
    alex = IdentityResolver(session_factory).get_or_create("Alex")
    store = PreferenceStore(session_factory)

    store.save_preferences(alex.id, catalog, {dishes.id: 2})
    with session_factory() as db:
        before = db.query(Preference).filter(Preference.chore_id == dishes.id).one()
        created_at, updated_at = before.created_at, before.updated_at

    store.save_preferences(alex.id, catalog, {dishes.id: 5})
    with session_factory() as db:
        after = db.query(Preference).filter(Preference.chore_id == dishes.id).one()

    assert created_at is not None
    assert after.created_at == created_at
    assert after.updated_at >= updated_at
    assert after.preference_score == 5
