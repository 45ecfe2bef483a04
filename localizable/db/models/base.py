# File: localizable/db/models/base.py
"""
Base models and mixins for Localizable.

This module provides:
- The declarative base shared by the localization table and host models
- EntityRef, the (entity_type, entity_id) pair that owns localized values
- LocalizableMixin and LocalizableRegistry, which record the ordered set of
  localizable fields each entity type declares
"""

from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Iterable, List, NamedTuple, Optional, Type

from sqlalchemy import MetaData
from sqlalchemy.orm import declarative_base

from localizable.core.exceptions import (
    UnsupportedEntityTypeException,
    ValidationException,
)

# Create the SQLAlchemy base
Base = declarative_base(metadata=MetaData())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EntityRef(NamedTuple):
    """Reference to the host record that owns localized fields."""

    entity_type: str
    entity_id: int

    @classmethod
    def of(cls, entity: Any) -> "EntityRef":
        """
        Build a reference from a host object.

        The entity type is ``__localizable_type__`` when the object's class
        defines one, otherwise the class name.

        Raises:
            ValidationException: If the entity has no id yet
        """
        entity_id = getattr(entity, "id", None)
        if entity_id is None:
            raise ValidationException(
                f"{type(entity).__name__} has no id; persist it before localizing"
            )
        return cls(entity_type_of(type(entity)), entity_id)

    def __str__(self) -> str:
        return f"{self.entity_type}#{self.entity_id}"


def entity_type_of(entity_class: Type[Any]) -> str:
    return getattr(entity_class, "__localizable_type__", None) or entity_class.__name__


class LocalizableRegistry:
    """
    Registry of localizable-field declarations keyed by entity type.

    Field order is preserved; it drives the order of GetAll and
    Placeholders output.
    """

    def __init__(self):
        self._fields: Dict[str, List[str]] = {}

    def register(self, entity_type: str, fields: Iterable[str]) -> None:
        """
        Declare the localizable fields of an entity type.

        Re-registering an entity type replaces its previous declaration.
        """
        ordered: List[str] = []
        for field in fields:
            if field not in ordered:
                ordered.append(field)
        self._fields[entity_type] = ordered

    def register_model(self, model_class: Type[Any]) -> None:
        self.register(entity_type_of(model_class), getattr(model_class, "__localizable__", []))

    def unregister(self, entity_type: str) -> None:
        self._fields.pop(entity_type, None)

    def is_registered(self, entity_type: str) -> bool:
        return entity_type in self._fields

    def get_fields(self, entity_type: str) -> List[str]:
        """
        Get the declared fields of an entity type.

        Raises:
            UnsupportedEntityTypeException: If the entity type was never registered
        """
        if entity_type not in self._fields:
            raise UnsupportedEntityTypeException(entity_type)
        return list(self._fields[entity_type])

    def entity_types(self) -> List[str]:
        return list(self._fields.keys())

    def clear(self) -> None:
        self._fields.clear()


# Process-wide registry populated by LocalizableMixin subclasses
localizable_registry = LocalizableRegistry()


class LocalizableMixin:
    """
    Mixin for host models whose fields can be overridden per locale.

    Usage:
        class Post(Base, LocalizableMixin):
            __tablename__ = "posts"
            __localizable__ = ["title", "body"]
    """

    __localizable__: ClassVar[List[str]] = []
    __localizable_type__: ClassVar[Optional[str]] = None

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if "__localizable__" in cls.__dict__:
            localizable_registry.register_model(cls)

    @property
    def localization_ref(self) -> EntityRef:
        return EntityRef.of(self)
