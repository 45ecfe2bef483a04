# File: localizable/db/models/localization.py

"""
Localization Model

One row per (entity, locale, field). The owning entity is referenced by
type name and id only; there is no foreign key, so rows are removed by the
localization service when the host reports the entity deleted.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from localizable.db.models.base import Base, utcnow


class Localization(Base):
    """
    Per-locale override of a single entity field.

    Attributes:
        id: Primary key for the localization record
        model_type: Type of the owning entity (e.g., 'Post')
        model_id: ID of the owning entity
        locale: Locale code (e.g., 'en', 'fr')
        field: Logical field name; need not be a stored column of the entity
        value: Localized text, or None when not yet set
        created_at: Timestamp when the record was created
        updated_at: Timestamp when the value was last written
    """
    __tablename__ = "localizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    model_type: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Type of the owning entity",
    )

    model_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="ID of the owning entity",
    )

    locale: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Locale code (e.g., 'en', 'fr')",
    )

    field: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Name of the localized field",
    )

    value: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Localized text; NULL means not yet set",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint(
            "model_type", "model_id", "locale", "field",
            name="uq_localizations_entity_locale_field",
        ),
        # Entity-wide lookups and cascade deletes
        Index("idx_localizations_entity", "model_type", "model_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Localization("
            f"id={self.id}, "
            f"model_type='{self.model_type}', "
            f"model_id={self.model_id}, "
            f"locale='{self.locale}', "
            f"field='{self.field}', "
            f"value_length={len(self.value) if self.value is not None else None}"
            f")>"
        )

    def to_dict(self) -> dict:
        """Convert localization to dictionary for API responses."""
        return {
            "id": self.id,
            "model_type": self.model_type,
            "model_id": self.model_id,
            "locale": self.locale,
            "field": self.field,
            "value": self.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
