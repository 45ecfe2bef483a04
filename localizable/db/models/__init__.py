"""
Initializes the models package for SQLAlchemy declarative base.

Importing this package registers the localizations table on ``Base.metadata``
so that ``Base.metadata.create_all()`` and Alembic autogenerate see it.
"""

from localizable.db.models.base import (
    Base,
    EntityRef,
    LocalizableMixin,
    LocalizableRegistry,
    localizable_registry,
)
from localizable.db.models.localization import Localization

__all__ = [
    "Base",
    "EntityRef",
    "LocalizableMixin",
    "LocalizableRegistry",
    "Localization",
    "localizable_registry",
]
