# tests/api/endpoints/test_localizations.py
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from localizable import main
from localizable.api import deps
from localizable.core.exceptions import ValidationException
from localizable.main import app
from localizable.services.localization_service import LocalizationService
from tests.conftest import FALLBACK_TEXT

BASE = "/api/v1/localizations"


@pytest.fixture
def startup_calls():
    return []


@pytest.fixture
def client(db_session, registry, test_settings, startup_calls, monkeypatch):
    monkeypatch.setattr(deps, "settings", test_settings)

    def record_init_db():
        startup_calls.append("init_db")
        return True

    monkeypatch.setattr(main, "init_db", record_init_db)

    def override_service():
        return LocalizationService(db_session, registry=registry, config=test_settings)

    app.dependency_overrides[deps.get_localization_service] = override_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_get_supported_locales(client):
    response = client.get(f"{BASE}/locales")

    assert response.status_code == 200
    assert response.json() == {"en": "English", "fr": "French"}


def test_get_localizable_fields(client):
    response = client.get(f"{BASE}/Post/fields")

    assert response.status_code == 200
    assert response.json() == ["title", "body"]


def test_unknown_entity_type_is_bad_request(client):
    assert client.get(f"{BASE}/Comment/fields").status_code == 400
    assert client.get(f"{BASE}/Comment/placeholders").status_code == 400
    assert client.get(f"{BASE}/Comment/1").status_code == 400


def test_get_placeholders(client):
    response = client.get(f"{BASE}/Post/placeholders")

    assert response.status_code == 200
    assert response.json() == {
        "en": {"title": None, "body": None},
        "fr": {"title": None, "body": None},
    }


def test_localize_field_and_resolve(client):
    response = client.put(f"{BASE}/Post/1/fr/title", json={"value": "Titre"})

    assert response.status_code == 200
    data = response.json()
    assert data["model_type"] == "Post"
    assert data["model_id"] == 1
    assert data["locale"] == "fr"
    assert data["field"] == "title"
    assert data["value"] == "Titre"

    response = client.get(f"{BASE}/Post/1/fr/title")
    assert response.status_code == 200
    assert response.json()["value"] == "Titre"


def test_resolve_field_uses_default_then_fallback(client):
    response = client.get(f"{BASE}/Post/1/fr/title", params={"default": "Native"})
    assert response.json()["value"] == "Native"

    response = client.get(f"{BASE}/Post/1/fr/title")
    assert response.json()["value"] == FALLBACK_TEXT


def test_localize_field_rejects_undeclared_field(client):
    response = client.put(f"{BASE}/Post/1/en/slug", json={"value": "hello"})

    assert response.status_code == 400
    assert "slug" in response.json()["detail"]
    assert client.get(f"{BASE}/Post/1").json()["en"] == {"title": None, "body": None}


def test_localize_field_rejects_unconfigured_locale(client):
    response = client.put(f"{BASE}/Post/1/de/title", json={"value": "Titel"})

    assert response.status_code == 400


def test_localize_many_returns_locale_values(client):
    response = client.put(f"{BASE}/Post/1/en", json={"title": "Title", "body": "Body"})

    assert response.status_code == 200
    assert response.json() == {"title": "Title", "body": "Body"}


def test_localize_many_is_all_or_nothing(client):
    response = client.put(f"{BASE}/Post/1/en", json={"title": "Title", "slug": "title"})

    assert response.status_code == 400
    assert client.get(f"{BASE}/Post/1").json()["en"]["title"] is None


def test_localize_many_locales_and_get_all(client):
    payload = {"en": {"title": "Title"}, "fr": {"title": "Titre", "body": "Corps"}}

    response = client.put(f"{BASE}/Post/1", json=payload)

    assert response.status_code == 200
    assert response.json() == {
        "en": {"title": "Title", "body": None},
        "fr": {"title": "Titre", "body": "Corps"},
    }
    assert client.get(f"{BASE}/Post/1", params={"locales": ["fr"]}).json() == {
        "fr": {"title": "Titre", "body": "Corps"}
    }


def test_localize_many_locales_rejects_unconfigured_locale(client):
    response = client.put(f"{BASE}/Post/1", json={"en": {"title": "Title"}, "de": {"title": "Titel"}})

    assert response.status_code == 400
    assert client.get(f"{BASE}/Post/1").json()["en"]["title"] is None


def test_delete_entity_localizations(client):
    client.put(f"{BASE}/Post/1/en", json={"title": "Title"})

    response = client.delete(f"{BASE}/Post/1")
    assert response.status_code == 204
    assert client.get(f"{BASE}/Post/1").json()["en"]["title"] is None

    assert client.delete(f"{BASE}/Post/1").status_code == 204


def test_resolved_fields_use_locale_query(client):
    client.put(f"{BASE}/Post/1/fr/title", json={"value": "Titre"})

    response = client.get(f"{BASE}/Post/1/resolved", params={"locale": "fr"})

    assert response.status_code == 200
    assert response.json() == {"title": "Titre", "body": FALLBACK_TEXT}


def test_resolved_fields_use_accept_language(client):
    client.put(f"{BASE}/Post/1/fr/title", json={"value": "Titre"})

    response = client.get(
        f"{BASE}/Post/1/resolved",
        headers={"Accept-Language": "de-DE, fr-CA;q=0.8, en;q=0.5"},
    )

    assert response.json()["title"] == "Titre"


def test_resolved_fields_default_locale(client):
    client.put(f"{BASE}/Post/1/en/title", json={"value": "Title"})

    response = client.get(f"{BASE}/Post/1/resolved", headers={"Accept-Language": "de"})

    assert response.json()["title"] == "Title"


def test_get_statistics(client):
    client.put(f"{BASE}/Post/1", json={"en": {"title": "Title"}, "fr": {"title": None}})

    response = client.get(f"{BASE}/stats")

    assert response.status_code == 200
    data = response.json()
    assert data["total_localizations"] == 2
    assert data["filled_localizations"] == 1
    assert data["supported_locales"] == ["en", "fr"]
    assert data["entity_types"] == ["Post"]


def test_cleanup_dry_run_then_delete(client):
    client.put(f"{BASE}/Post/1/en/title", json={"value": "One"})
    client.put(f"{BASE}/Post/2/en/title", json={"value": "Two"})

    response = client.post(f"{BASE}/Post/cleanup", json={"valid_entity_ids": [1, 1]})
    assert response.status_code == 200
    assert response.json() == {
        "entity_type": "Post",
        "dry_run": True,
        "valid_entities": 1,
        "orphaned_localizations": 1,
        "orphaned_entity_ids": [2],
        "action": "would_delete",
    }

    response = client.post(f"{BASE}/Post/cleanup", json={"valid_entity_ids": [1], "dry_run": False})
    assert response.json()["action"] == "deleted"
    assert client.get(f"{BASE}/Post/2/en/title").json()["value"] == FALLBACK_TEXT


def test_storage_failure_is_service_unavailable(client, db_session, monkeypatch):
    def broken_execute(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "execute", broken_execute)

    response = client.get(f"{BASE}/Post/1/en/title")

    assert response.status_code == 503
    assert response.json()["detail"] == "Localization storage is unavailable"


def test_unhandled_validation_exception_maps_to_bad_request(client):
    error = ValidationException("Entity type 'Post' declares no localizable fields")

    with patch.object(LocalizationService, "resolve", side_effect=error):
        response = client.get(f"{BASE}/Post/1/en/title")

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_001"


def test_invalid_entity_id_is_unprocessable(client):
    assert client.get(f"{BASE}/Post/0").status_code == 422


@pytest.mark.parametrize(
    "header, expected",
    [
        (None, []),
        ("", []),
        ("fr", ["fr"]),
        ("en;q=0.5, fr", ["fr", "en"]),
        ("de, *, nl;q=0", ["de"]),
        ("en-US;q=0.9, en;q=0.9, fr;q=bad", ["en-US", "en"]),
    ],
)
def test_parse_accept_language(header, expected):
    assert deps.parse_accept_language(header) == expected


def test_startup_creates_schema(client, startup_calls):
    assert startup_calls == ["init_db"]
