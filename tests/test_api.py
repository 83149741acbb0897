from functools import partial

import pytest
from fastapi.testclient import TestClient

from chore_prefs.catalog import load_chores
from chore_prefs.errors import RemoteWriteError
from chore_prefs.identity import IdentityResolver
from chore_prefs.main import (
    app,
    get_catalog_loader,
    get_health_check,
    get_identity_resolver,
    get_preference_store,
)
from chore_prefs.preference_store import PreferenceStore
from chore_prefs.session import SAVE_ERROR_MESSAGE


class FailingStore(PreferenceStore):
    def save_preferences(self, roommate_id, catalog, scores):
        raise RemoteWriteError("upsert failed")


@pytest.fixture
def client(session_factory, catalog):
    app.dependency_overrides[get_identity_resolver] = lambda: IdentityResolver(session_factory)
    app.dependency_overrides[get_preference_store] = lambda: PreferenceStore(session_factory)
    app.dependency_overrides[get_catalog_loader] = lambda: partial(load_chores, session_factory)
    app.dependency_overrides[get_health_check] = lambda: lambda: True
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy", "database": "connected"}


def test_list_chores(client, catalog):
    response = client.get("/chores")

    assert response.status_code == 200
    assert response.json() == [{"id": c.id, "name": c.name} for c in catalog]


def test_unknown_roommate_gets_defaults(client, catalog):
    response = client.get("/roommates/Alex/preferences")

    assert response.status_code == 200
    assert response.json() == {
        "roommate": None,
        "scores": {str(c.id): 1 for c in catalog},
    }


def test_put_creates_roommate_then_updates(client, catalog):
    dishes, trash = catalog

    first = client.put("/roommates/Alex/preferences", json={"scores": {str(dishes.id): 4}})
    assert first.status_code == 200
    alex = first.json()["roommate"]
    assert alex["name"] == "Alex"
    assert first.json()["scores"] == {str(dishes.id): 4, str(trash.id): 1}

    second = client.put("/roommates/Alex/preferences", json={"scores": {str(dishes.id): 5}})
    assert second.json()["roommate"] == alex

    stored = client.get("/roommates/Alex/preferences").json()
    assert stored["roommate"] == alex
    assert stored["scores"] == {str(dishes.id): 5, str(trash.id): 1}


def test_put_rejects_out_of_range_score(client, catalog):
    response = client.put(
        "/roommates/Alex/preferences", json={"scores": {str(catalog[0].id): 6}}
    )

    assert response.status_code == 422


def test_put_rejects_unknown_chore(client):
    response = client.put("/roommates/Alex/preferences", json={"scores": {"999": 3}})

    assert response.status_code == 422


def test_blank_name_rejected(client):
    assert client.get("/roommates/%20/preferences").status_code == 422


def test_put_write_failure_returns_error_notice(client, session_factory):
    app.dependency_overrides[get_preference_store] = lambda: FailingStore(session_factory)

    response = client.put("/roommates/Alex/preferences", json={"scores": {}})

    assert response.status_code == 502
    assert response.json()["detail"] == SAVE_ERROR_MESSAGE
