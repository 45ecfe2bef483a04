# tests/test_localization_repository.py
import pytest
from sqlalchemy.exc import OperationalError

from localizable.core.exceptions import StorageException
from localizable.db.models import Localization


def _seed(repository):
    repository.upsert_localization("Post", 1, "en", "title", "Title")
    repository.upsert_localization("Post", 1, "fr", "title", "Titre")
    repository.upsert_localization("Post", 1, "fr", "body", None)
    repository.upsert_localization("Post", 2, "en", "title", "Other")
    repository.upsert_localization("cms_page", 1, "en", "heading", "Heading")


def test_upsert_creates_then_updates(repository):
    created = repository.upsert_localization("Post", 1, "en", "title", "First")
    updated = repository.upsert_localization("Post", 1, "en", "title", "Second")

    assert updated.id == created.id
    assert updated.value == "Second"
    assert repository.count() == 1


def test_find_localization(repository):
    _seed(repository)

    found = repository.find_localization("Post", 1, "fr", "title")

    assert isinstance(found, Localization)
    assert found.value == "Titre"
    assert repository.find_localization("Post", 1, "de", "title") is None
    assert repository.find_localization("Post", 3, "en", "title") is None


def test_find_localizations_for_entity_filters(repository):
    _seed(repository)

    everything = repository.find_localizations_for_entity("Post", 1)
    assert [(l.locale, l.field) for l in everything] == [("en", "title"), ("fr", "body"), ("fr", "title")]

    french = repository.find_localizations_for_entity("Post", 1, locales=["fr"])
    assert {l.field for l in french} == {"title", "body"}

    titles = repository.find_localizations_for_entity("Post", 1, fields=["title"])
    assert {l.locale for l in titles} == {"en", "fr"}


def test_delete_localizations_for_entity(repository):
    _seed(repository)

    assert repository.delete_localizations_for_entity("Post", 1) == 3
    assert repository.find_localizations_for_entity("Post", 1) == []
    assert repository.count(model_type="Post") == 1
    assert repository.delete_localizations_for_entity("Post", 1) == 0


def test_get_localization_statistics(repository):
    _seed(repository)

    stats = repository.get_localization_statistics()

    assert stats["total_localizations"] == 5
    assert stats["filled_localizations"] == 4
    assert stats["unique_entities"] == 3
    assert stats["by_locale"] == {"en": 3, "fr": 2}
    assert stats["by_entity_type"] == {"Post": 4, "cms_page": 1}
    assert isinstance(stats["latest_update"], str)


def test_get_localization_statistics_empty(repository):
    stats = repository.get_localization_statistics()

    assert stats["total_localizations"] == 0
    assert stats["by_locale"] == {}
    assert stats["latest_update"] is None


def test_cleanup_orphaned_localizations(repository):
    _seed(repository)

    count, orphaned_ids = repository.cleanup_orphaned_localizations("Post", [2], dry_run=True)
    assert (count, orphaned_ids) == (3, [1])
    assert repository.count(model_type="Post") == 4

    count, orphaned_ids = repository.cleanup_orphaned_localizations("Post", [2], dry_run=False)
    assert (count, orphaned_ids) == (3, [1])
    assert repository.count(model_type="Post") == 1
    assert repository.count(model_type="cms_page") == 1


def test_cleanup_without_valid_ids_targets_whole_type(repository):
    _seed(repository)

    count, orphaned_ids = repository.cleanup_orphaned_localizations("Post", [], dry_run=True)

    assert count == 4
    assert orphaned_ids == [1, 2]


def test_storage_failure_raises_storage_exception(repository, monkeypatch):
    def broken_execute(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(repository.session, "execute", broken_execute)

    with pytest.raises(StorageException) as exc_info:
        repository.find_localization("Post", 1, "en", "title")

    assert exc_info.value.code == "STORAGE_001"
    assert exc_info.value.details["operation"] == "find_localization"
    assert isinstance(exc_info.value.__cause__, OperationalError)


def test_delete_failure_raises_storage_exception(repository, monkeypatch):
    def broken_execute(*args, **kwargs):
        raise OperationalError("DELETE", {}, Exception("disk I/O error"))

    monkeypatch.setattr(repository.session, "execute", broken_execute)

    with pytest.raises(StorageException):
        repository.delete_localizations_for_entity("Post", 1)
