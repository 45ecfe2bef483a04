# tests/test_base_repository.py
from localizable.repositories.base_repository import BaseRepository
from tests.host_models import Post


def test_crud_on_host_model(db_session):
    repo = BaseRepository(db_session, Post)

    first = repo.create({"title": "First", "body": "One", "unknown": "ignored"})
    repo.create({"title": "Second"})

    assert repo.get_by_id(first.id).title == "First"
    assert repo.count() == 2
    assert repo.count(title="Second") == 1
    assert [p.title for p in repo.list()] == ["First", "Second"]
    assert [p.title for p in repo.list(skip=1, limit=1)] == ["Second"]

    updated = repo.update(first.id, {"title": "Updated"})
    assert updated.title == "Updated"
    assert repo.update(999, {"title": "Missing"}) is None

    assert repo.delete(first.id) is True
    assert repo.delete(first.id) is False
    assert repo.get_by_id(first.id) is None


def test_create_without_commit_only_flushes(db_session):
    repo = BaseRepository(db_session, Post)

    post = repo.create({"title": "Draft"}, commit=False)
    assert post.id is not None

    db_session.rollback()
    assert repo.count() == 0
