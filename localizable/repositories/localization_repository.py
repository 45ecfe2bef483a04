# File: localizable/repositories/localization_repository.py

"""
Localization Repository

Storage access for the localizations table. Every SQLAlchemy failure is
logged, the session rolled back, and re-raised as StorageException.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import and_, func, select, delete
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from localizable.core.exceptions import StorageException
from localizable.db.models.base import utcnow
from localizable.db.models.localization import Localization
from localizable.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)

# Columns of uq_localizations_entity_locale_field
UNIQUE_KEY = ["model_type", "model_id", "locale", "field"]


class LocalizationRepository(BaseRepository[Localization]):
    """Repository for per-entity, per-locale, per-field localization records."""

    def __init__(self, session: Session):
        """
        Initialize the localization repository.

        Args:
            session: SQLAlchemy database session
        """
        super().__init__(session, Localization)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _storage_error(self, operation: str, e: SQLAlchemyError) -> StorageException:
        self.logger.error(f"Database error in {operation}: {e}", exc_info=True)
        self.session.rollback()
        return StorageException(f"Failed to {operation.replace('_', ' ')}: {e}", operation=operation)

    def find_localization(
            self,
            entity_type: str,
            entity_id: int,
            locale: str,
            field: str
    ) -> Optional[Localization]:
        """
        Find the unique record for an entity, locale, and field.

        Returns:
            Localization if found, None otherwise

        Raises:
            StorageException: If database operation fails
        """
        try:
            self.logger.debug(
                f"Finding localization: model_type={entity_type}, model_id={entity_id}, "
                f"locale={locale}, field={field}"
            )
            stmt = self._lookup_stmt(entity_type, entity_id, locale, field)
            return self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._storage_error("find_localization", e) from e

    def find_localizations_for_entity(
            self,
            entity_type: str,
            entity_id: int,
            locales: Optional[Sequence[str]] = None,
            fields: Optional[Sequence[str]] = None
    ) -> List[Localization]:
        """
        Find all records of an entity, optionally restricted to locales and fields.

        Raises:
            StorageException: If database operation fails
        """
        try:
            stmt = select(Localization).where(
                and_(
                    Localization.model_type == entity_type,
                    Localization.model_id == entity_id,
                )
            )
            if locales is not None:
                stmt = stmt.where(Localization.locale.in_(list(locales)))
            if fields is not None:
                stmt = stmt.where(Localization.field.in_(list(fields)))

            localizations = list(
                self.session.execute(
                    stmt.order_by(Localization.locale, Localization.field)
                ).scalars().all()
            )
            self.logger.debug(f"Found {len(localizations)} localizations for {entity_type}#{entity_id}")
            return localizations
        except SQLAlchemyError as e:
            raise self._storage_error("find_localizations_for_entity", e) from e

    def upsert_localization(
            self,
            entity_type: str,
            entity_id: int,
            locale: str,
            field: str,
            value: Optional[str],
            commit: bool = True
    ) -> Localization:
        """
        Create or update the unique record for an entity, locale, and field.

        On SQLite, PostgreSQL and MySQL a missing record is inserted with the
        dialect's conflict clause, so a concurrent writer that inserted the
        same tuple first is overwritten (last write wins). Other dialects
        insert through the ORM and a collision surfaces as StorageException.

        Args:
            commit: Commit immediately, or only flush into the caller's transaction

        Raises:
            StorageException: If database operation fails
        """
        existing = self.find_localization(entity_type, entity_id, locale, field)
        try:
            if existing:
                updated = self.update(existing.id, {"value": value, "updated_at": utcnow()}, commit=commit)
                self.logger.info(f"Updated localization ID {existing.id}: {entity_type}#{entity_id}.{field} [{locale}]")
                return updated

            data = {
                "model_type": entity_type,
                "model_id": entity_id,
                "locale": locale,
                "field": field,
                "value": value,
            }
            stmt = self._insert_or_update_stmt(data)
            if stmt is None:
                created = self.create(data, commit=commit)
            else:
                self.session.execute(stmt)
                self._finish(commit)
                created = self.session.execute(
                    self._lookup_stmt(entity_type, entity_id, locale, field)
                    .execution_options(populate_existing=True)
                ).scalar_one()
            self.logger.info(f"Stored localization ID {created.id} for {entity_type}#{entity_id}.{field} [{locale}]")
            return created
        except SQLAlchemyError as e:
            raise self._storage_error("upsert_localization", e) from e

    def _insert_or_update_stmt(self, data: Dict[str, Any]):
        """INSERT that updates the existing row on a unique-key collision, or None if unsupported."""
        now = utcnow()
        values = dict(data, created_at=now, updated_at=now)
        dialect = self.session.get_bind().dialect.name

        if dialect in ("sqlite", "postgresql"):
            insert = sqlite_insert if dialect == "sqlite" else postgresql_insert
            stmt = insert(Localization.__table__).values(**values)
            return stmt.on_conflict_do_update(
                index_elements=UNIQUE_KEY,
                set_={"value": stmt.excluded["value"], "updated_at": stmt.excluded["updated_at"]},
            )
        if dialect in ("mysql", "mariadb"):
            stmt = mysql_insert(Localization.__table__).values(**values)
            return stmt.on_duplicate_key_update(
                value=stmt.inserted["value"], updated_at=stmt.inserted["updated_at"]
            )
        return None

    @staticmethod
    def _lookup_stmt(entity_type: str, entity_id: int, locale: str, field: str):
        return select(Localization).where(
            and_(
                Localization.model_type == entity_type,
                Localization.model_id == entity_id,
                Localization.locale == locale,
                Localization.field == field,
            )
        )

    def delete_localizations_for_entity(self, entity_type: str, entity_id: int, commit: bool = True) -> int:
        """
        Delete all records of an entity.

        Returns:
            Number of records deleted

        Raises:
            StorageException: If database operation fails
        """
        try:
            result = self.session.execute(
                delete(Localization).where(
                    and_(
                        Localization.model_type == entity_type,
                        Localization.model_id == entity_id,
                    )
                )
            )
            self._finish(commit)
            deleted_count = result.rowcount or 0
            self.logger.info(f"Deleted {deleted_count} localizations for {entity_type}#{entity_id}")
            return deleted_count
        except SQLAlchemyError as e:
            raise self._storage_error("delete_localizations_for_entity", e) from e

    def get_localization_statistics(self) -> Dict[str, Any]:
        """
        Counts of stored localizations in total, by locale, and by entity type.

        Raises:
            StorageException: If database operation fails
        """
        try:
            total = self.count()
            filled = self.session.execute(
                select(func.count(Localization.id)).where(Localization.value.is_not(None))
            ).scalar_one()
            by_locale = self.session.execute(
                select(Localization.locale, func.count(Localization.id))
                .group_by(Localization.locale)
                .order_by(Localization.locale)
            ).all()
            by_entity_type = self.session.execute(
                select(Localization.model_type, func.count(Localization.id))
                .group_by(Localization.model_type)
                .order_by(Localization.model_type)
            ).all()
            unique_entities = self.session.execute(
                select(func.count()).select_from(
                    select(Localization.model_type, Localization.model_id).distinct().subquery()
                )
            ).scalar_one()
            latest_update = self.session.execute(select(func.max(Localization.updated_at))).scalar()

            return {
                "total_localizations": total,
                "filled_localizations": filled,
                "unique_entities": unique_entities,
                "by_locale": {locale: count for locale, count in by_locale},
                "by_entity_type": {entity_type: count for entity_type, count in by_entity_type},
                "latest_update": latest_update.isoformat() if latest_update else None,
            }
        except SQLAlchemyError as e:
            raise self._storage_error("get_localization_statistics", e) from e

    def cleanup_orphaned_localizations(
            self,
            entity_type: str,
            valid_entity_ids: Sequence[int],
            dry_run: bool = True
    ) -> Tuple[int, List[int]]:
        """
        Find, and unless dry_run delete, records of entities that no longer exist.

        Returns:
            Tuple of (count_of_orphaned_records, sorted_orphaned_entity_ids)

        Raises:
            StorageException: If database operation fails
        """
        try:
            condition = Localization.model_type == entity_type
            if valid_entity_ids:
                condition = and_(condition, Localization.model_id.not_in(list(valid_entity_ids)))

            orphaned_ids = sorted(
                self.session.execute(select(Localization.model_id).where(condition).distinct()).scalars().all()
            )

            if dry_run:
                count = self.session.execute(
                    select(func.count(Localization.id)).where(condition)
                ).scalar_one()
                self.logger.info(f"Found {count} orphaned localizations for {entity_type} (dry run)")
                return count, orphaned_ids

            count = self.session.execute(delete(Localization).where(condition)).rowcount or 0
            self.session.commit()
            self.logger.info(f"Deleted {count} orphaned localizations for {entity_type}")
            return count, orphaned_ids
        except SQLAlchemyError as e:
            raise self._storage_error("cleanup_orphaned_localizations", e) from e
