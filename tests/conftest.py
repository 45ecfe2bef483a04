# tests/conftest.py
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from localizable.core.config import Settings
from localizable.db.models import Base, EntityRef, LocalizableRegistry
from localizable.repositories.localization_repository import LocalizationRepository
from localizable.services.localization_service import LocalizationService
from tests.host_models import Post  # noqa: F401  registers the posts table

FALLBACK_TEXT = "This field is not translated yet."


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def query_counter(engine):
    """Counts SQL statements sent to the engine."""
    statements = []

    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine, "before_cursor_execute", before_cursor_execute)
    yield statements
    event.remove(engine, "before_cursor_execute", before_cursor_execute)


@pytest.fixture
def test_settings():
    return Settings(
        LOCALES={"en": "English", "fr": "French"},
        DEFAULT_LOCALE="en",
        FIELD_FALLBACK=True,
        FIELD_FALLBACK_VALUE=FALLBACK_TEXT,
    )


@pytest.fixture
def registry():
    registry = LocalizableRegistry()
    registry.register("Post", ["title", "body"])
    return registry


@pytest.fixture
def repository(db_session):
    return LocalizationRepository(db_session)


@pytest.fixture
def service(db_session, registry, test_settings):
    return LocalizationService(db_session, registry=registry, config=test_settings)


@pytest.fixture
def post_ref():
    return EntityRef("Post", 1)
