"""
Database session management for Localizable.

This module provides:
1. The SQLAlchemy engine built from ``settings.DATABASE_URL``
2. The ``SessionLocal`` session factory
3. A FastAPI dependency and a transaction context manager
4. Schema creation for the localizations table

Usage:
    from localizable.db.session import get_db

    # In FastAPI dependency
    def some_endpoint(db: Session = Depends(get_db)):
        # Use db for database operations
        ...
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from localizable.core.config import settings
from localizable.db.models import Base

# Configure module logger
logger = logging.getLogger(__name__)


def create_db_engine(database_url: str, echo: bool = False, **kwargs: Any) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections are shared across threads (FastAPI runs sync endpoints
    in a thread pool) and get foreign keys enabled.
    """
    connect_args: Dict[str, Any] = kwargs.pop("connect_args", {})
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        connect_args.setdefault("check_same_thread", False)

    new_engine = create_engine(
        database_url,
        connect_args=connect_args,
        pool_pre_ping=True,
        echo=echo,
        **kwargs,
    )

    if is_sqlite:
        @event.listens_for(new_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.close()

    logger.info(f"Created database engine for {new_engine.url.render_as_string(hide_password=True)}")
    return new_engine


engine = create_db_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# -----------------------------------------------------------------------------
# FastAPI Dependency
# -----------------------------------------------------------------------------


def get_db() -> Generator[Session, None, None]:
    """
    Get a database session with proper resource management.

    Returns:
        SQLAlchemy Session for database operations
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# -----------------------------------------------------------------------------
# Transaction Support
# -----------------------------------------------------------------------------


@contextmanager
def transaction(session=None, session_factory=None):
    """
    Context manager for database transactions.

    Args:
        session: Optional session to use (if None, creates a new one)
        session_factory: Factory used when no session is given; defaults to SessionLocal

    Yields:
        Database session for use within the transaction
    """
    close_session = False

    if session is None:
        session = (session_factory or SessionLocal)()
        close_session = True

    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        if close_session:
            session.close()


# -----------------------------------------------------------------------------
# Database Verification and Initialization
# -----------------------------------------------------------------------------


def verify_db_connection(bind: Engine = None) -> bool:
    """
    Verify that we can connect to the database.

    Returns:
        True if connection succeeds, False otherwise
    """
    try:
        with (bind or engine).connect() as connection:
            result = connection.execute(text("SELECT 1")).scalar()
            logger.info(f"Database connection verified: {result}")
            return True
    except Exception as e:
        logger.error(f"Database connection verification failed: {e}")
        return False


def init_db(reset: bool = False, bind: Engine = None) -> bool:
    """
    Initialize the database schema.

    Args:
        reset: Whether to drop and recreate the tables
        bind: Engine to use; defaults to the module engine

    Returns:
        True if initialization succeeds, False otherwise
    """
    bind = bind or engine
    logger.info("Initializing database schema...")

    try:
        if not verify_db_connection(bind):
            logger.error("Engine connection test failed before create_all")
            return False

        if reset:
            logger.info("Dropping all tables for reset...")
            Base.metadata.drop_all(bind=bind)

        Base.metadata.create_all(bind=bind)
        logger.info(f"Database schema initialized with {len(Base.metadata.tables)} tables")
        return True
    except Exception as e:
        logger.error(f"Database schema initialization failed: {e}", exc_info=True)
        return False
