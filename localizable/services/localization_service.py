# File: localizable/services/localization_service.py

"""
Localization Service

The overlay store for per-entity, per-locale field values. Host code calls it
explicitly: after loading an entity (``translate``/``hydrate``) and when an
entity is removed (``destroy_localizations``). The active locale is always an
argument, never ambient state.

Resolution order for a field:
1. Stored, non-null value for the requested locale
2. The entity's own (native) value, when given
3. The configured fallback text, when fallback is enabled
4. None
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from localizable.core.config import Settings, settings
from localizable.core.events import EntityDeletedEvent, EntityRetrievedEvent, EventBus, global_event_bus
from localizable.core.exceptions import (
    FieldNotLocalizableException,
    StorageException,
    ValidationException,
)
from localizable.db.models.base import EntityRef, LocalizableRegistry, localizable_registry
from localizable.db.models.localization import Localization
from localizable.db.session import transaction
from localizable.repositories.localization_repository import LocalizationRepository

logger = logging.getLogger(__name__)

EntityLike = Union[EntityRef, Tuple[str, int], Any]
LocalizationMap = Dict[str, Dict[str, Optional[str]]]


@dataclass(frozen=True)
class FallbackPolicy:
    """What a field resolves to when it has neither a localized nor a native value."""

    enabled: bool
    value: Optional[str] = None

    @classmethod
    def from_settings(cls, config: Settings) -> "FallbackPolicy":
        return cls(enabled=config.FIELD_FALLBACK, value=config.FIELD_FALLBACK_VALUE)

    @classmethod
    def disabled(cls) -> "FallbackPolicy":
        return cls(enabled=False)

    def apply(self) -> Optional[str]:
        return self.value if self.enabled else None


class LocalizationService:
    """
    Service for reading and writing localized field values.

    Writes are validated against the localizable fields the entity type
    declares in the registry. Batch writes (``localize_many`` and
    ``localize_many_locales``) validate every field first and then run as a
    single transaction: either every value is stored or none is.
    """

    def __init__(
            self,
            session: Session,
            registry: Optional[LocalizableRegistry] = None,
            config: Optional[Settings] = None,
            repository: Optional[LocalizationRepository] = None
    ):
        """
        Initialize the LocalizationService.

        Args:
            session: SQLAlchemy database session
            registry: Localizable-field declarations; defaults to the process-wide registry
            config: Settings providing locales and fallback policy
            repository: Optional repository instance
        """
        self.session = session
        self.registry = registry if registry is not None else localizable_registry
        self.config = config or settings
        self.repository = repository or LocalizationRepository(session)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    # Configuration and declarations

    def get_supported_locales(self) -> Dict[str, str]:
        """Configured locale codes mapped to their display names, in order."""
        return dict(self.config.LOCALES)

    def get_supported_entity_types(self) -> List[str]:
        return self.registry.entity_types()

    def get_translatable_fields(self, entity_type: str) -> List[str]:
        """
        Get the declared localizable fields for an entity type.

        Raises:
            ValidationException: If entity type is not registered
        """
        return self.registry.get_fields(entity_type)

    def validate_locale(self, locale: str) -> str:
        """
        Ensure a locale is one of the configured locales.

        Raises:
            ValidationException: If the locale is not configured
        """
        if locale not in self.config.LOCALES:
            raise ValidationException(
                f"Unsupported locale: {locale}",
                {"locale": [f"Supported: {self.config.locale_codes()}"]},
            )
        return locale

    def fallback_policy(self) -> FallbackPolicy:
        return FallbackPolicy.from_settings(self.config)

    @staticmethod
    def _ref(entity: EntityLike) -> EntityRef:
        if isinstance(entity, EntityRef):
            return entity
        if isinstance(entity, tuple) and len(entity) == 2:
            return EntityRef(*entity)
        return EntityRef.of(entity)

    def _validate_fields(self, ref: EntityRef, fields: Iterable[str]) -> None:
        allowed = self.registry.get_fields(ref.entity_type)
        invalid: List[str] = []
        for field in fields:
            if field not in allowed and field not in invalid:
                invalid.append(field)
        if invalid:
            self.logger.warning(f"Rejected write to non-localizable fields {invalid} of {ref}")
            raise FieldNotLocalizableException(ref.entity_type, invalid, allowed)

    # Writes

    def localize(
            self,
            entity: EntityLike,
            locale: str,
            field: str,
            value: Optional[str] = None
    ) -> Localization:
        """
        Set the localized value of one field.

        Args:
            entity: EntityRef, (entity_type, entity_id) tuple, or host object
            locale: Locale code
            field: Declared localizable field
            value: Localized text, or None to mark as not yet set

        Returns:
            The created or updated Localization record

        Raises:
            ValidationException: If the field is not localizable for the entity type
            StorageException: If the database operation fails
        """
        ref = self._ref(entity)
        self._validate_fields(ref, [field])
        localization = self.repository.upsert_localization(
            ref.entity_type, ref.entity_id, locale, field, value
        )
        self.logger.info(f"Localized {ref}.{field} [{locale}]")
        return localization

    def localize_many(
            self,
            entity: EntityLike,
            locale: str,
            fields: Mapping[str, Optional[str]]
    ) -> None:
        """
        Set several fields of one locale, in mapping order.

        Raises:
            ValidationException: If any field is not localizable; nothing is written
            StorageException: If the database operation fails; nothing is written
        """
        self._localize_batch(self._ref(entity), {locale: fields})

    def localize_many_locales(
            self,
            entity: EntityLike,
            localization_data: Mapping[str, Mapping[str, Optional[str]]]
    ) -> None:
        """
        Set fields for several locales: ``{locale: {field: value}}``.

        Locales are applied in mapping order, fields in mapping order within
        each locale.

        Raises:
            ValidationException: If any field is not localizable; nothing is written
            StorageException: If the database operation fails; nothing is written
        """
        self._localize_batch(self._ref(entity), localization_data)

    def _localize_batch(self, ref: EntityRef, localization_data: Mapping[str, Mapping[str, Optional[str]]]) -> None:
        self._validate_fields(
            ref, [field for fields in localization_data.values() for field in fields]
        )

        written = 0
        for locale, fields in localization_data.items():
            for field, value in fields.items():
                self.repository.upsert_localization(
                    ref.entity_type, ref.entity_id, locale, field, value, commit=False
                )
                written += 1

        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to commit localizations for {ref}: {e}", exc_info=True)
            self.session.rollback()
            raise StorageException(f"Failed to commit localizations: {e}", operation="localize_batch") from e

        self.logger.info(f"Localized {written} values of {ref} in locales {list(localization_data.keys())}")

    def destroy_localizations(self, entity: EntityLike) -> int:
        """
        Delete every localization of an entity.

        Safe to call for an entity without localizations.

        Returns:
            Number of records deleted

        Raises:
            StorageException: If the database operation fails
        """
        ref = self._ref(entity)
        return self.repository.delete_localizations_for_entity(ref.entity_type, ref.entity_id)

    # Reads

    def resolve(
            self,
            entity: EntityLike,
            locale: str,
            field: str,
            default: Optional[str] = None,
            fallback: Optional[FallbackPolicy] = None
    ) -> Optional[str]:
        """
        Resolve the value of one field for a locale.

        Args:
            entity: EntityRef, (entity_type, entity_id) tuple, or host object
            locale: Locale to resolve for
            field: Field name
            default: The entity's native value, used when no localized value is stored
            fallback: Fallback policy; defaults to the configured one

        Returns:
            Localized value, native default, fallback text, or None, in that order
        """
        ref = self._ref(entity)
        localization = self.repository.find_localization(ref.entity_type, ref.entity_id, locale, field)
        if localization is not None and localization.value is not None:
            return localization.value
        if default is not None:
            return default
        return (fallback or self.fallback_policy()).apply()

    def get_localizations(
            self,
            entity: EntityLike,
            locales: Optional[Sequence[str]] = None,
            fields: Optional[Sequence[str]] = None
    ) -> LocalizationMap:
        """
        Get stored values for every (locale, field) pair, without fallback.

        Args:
            entity: EntityRef, (entity_type, entity_id) tuple, or host object
            locales: Locales to include; defaults to the configured locales
            fields: Fields to include; defaults to the entity type's declared fields

        Returns:
            ``{locale: {field: value_or_None}}`` in locale-major, field-minor order
        """
        ref = self._ref(entity)
        if locales is None:
            locales = self.config.locale_codes()
        if fields is None:
            fields = self.registry.get_fields(ref.entity_type)

        stored = {
            (localization.locale, localization.field): localization.value
            for localization in self.repository.find_localizations_for_entity(
                ref.entity_type, ref.entity_id, locales=locales, fields=fields
            )
        }
        return {
            locale: {field: stored.get((locale, field)) for field in fields}
            for locale in locales
        }

    @staticmethod
    def get_localizables(fields: Sequence[str], locales: Sequence[str]) -> Dict[str, Dict[str, None]]:
        """Empty ``{locale: {field: None}}`` scaffold for an input form."""
        return {locale: {field: None for field in fields} for locale in locales}

    def get_localizables_for(self, entity_type: str) -> Dict[str, Dict[str, None]]:
        """Placeholders for an entity type's declared fields across the configured locales."""
        return self.get_localizables(self.registry.get_fields(entity_type), self.config.locale_codes())

    # Host object overlay

    def translate(self, entity: Any, locale: str) -> Dict[str, Optional[str]]:
        """
        Resolve every declared field of a host object for a locale.

        The object's current attribute value for each field is its native default.

        Returns:
            ``{field: resolved_value}`` in declaration order
        """
        ref = self._ref(entity)
        return {
            field: self.resolve(ref, locale, field, default=getattr(entity, field, None))
            for field in self.registry.get_fields(ref.entity_type)
        }

    def hydrate(self, entity: Any, locale: str) -> Any:
        """
        Overwrite a host object's localizable attributes with their resolved values.

        Mapped attributes of SQLAlchemy instances are set as committed state, so
        the overlay is never flushed back into the entity's own columns. This
        also discards any pending change to those attributes. Other attributes
        are set with ``setattr``.
        """
        state = sa_inspect(entity, raiseerr=False)
        mapped = set(state.mapper.column_attrs.keys()) if state is not None else set()
        for field, value in self.translate(entity, locale).items():
            if field in mapped:
                set_committed_value(entity, field, value)
            else:
                setattr(entity, field, value)
        return entity

    def bulk_hydrate(self, entities: List[Any], locale: str) -> List[Any]:
        for entity in entities:
            self.hydrate(entity, locale)
        return entities

    # Host lifecycle notifications

    def handle_entity_retrieved(self, event: EntityRetrievedEvent) -> None:
        self.hydrate(event.entity, event.locale)

    def handle_entity_deleted(self, event: EntityDeletedEvent) -> None:
        deleted = self.destroy_localizations(EntityRef(event.entity_type, event.entity_id))
        self.logger.debug(f"Entity deleted event {event.event_id} removed {deleted} localizations")

    # Administration

    def get_translation_statistics(self) -> Dict[str, Any]:
        """Storage statistics plus the configured locales and declared entity types."""
        stats = self.repository.get_localization_statistics()
        stats["supported_locales"] = self.config.locale_codes()
        stats["entity_types"] = self.get_supported_entity_types()
        return stats

    def cleanup_orphaned_localizations(
            self,
            entity_type: str,
            valid_entity_ids: Sequence[int],
            dry_run: bool = True
    ) -> Dict[str, Any]:
        """
        Remove localizations whose owning entity no longer exists.

        Args:
            entity_type: Entity type to clean up
            valid_entity_ids: IDs of entities that still exist
            dry_run: If True, only report what would be deleted
        """
        count, orphaned_ids = self.repository.cleanup_orphaned_localizations(
            entity_type, valid_entity_ids, dry_run
        )
        return {
            "entity_type": entity_type,
            "dry_run": dry_run,
            "valid_entities": len(valid_entity_ids),
            "orphaned_localizations": count,
            "orphaned_entity_ids": orphaned_ids,
            "action": "would_delete" if dry_run else "deleted",
        }


def register_event_handlers(
        bus: Optional[EventBus] = None,
        session_factory: Optional[Callable[[], Session]] = None,
        registry: Optional[LocalizableRegistry] = None,
        config: Optional[Settings] = None
) -> Dict[type, Callable]:
    """
    Subscribe the localization store to host lifecycle events on a bus.

    Each event is handled in its own session from ``session_factory``.

    The bus logs handler errors and does not re-raise them, so a publisher
    is never told that a cascade delete failed. Callers that must react to a
    StorageException should call ``destroy_localizations`` directly.

    Args:
        bus: Event bus to subscribe to; defaults to ``global_event_bus``
        session_factory: Session factory; defaults to ``SessionLocal``

    Returns:
        The subscribed handlers keyed by event class, for unsubscribing
    """
    bus = bus if bus is not None else global_event_bus

    def on_entity_retrieved(event: EntityRetrievedEvent) -> None:
        with transaction(session_factory=session_factory) as session:
            LocalizationService(session, registry, config).handle_entity_retrieved(event)

    def on_entity_deleted(event: EntityDeletedEvent) -> None:
        with transaction(session_factory=session_factory) as session:
            LocalizationService(session, registry, config).handle_entity_deleted(event)

    handlers = {
        EntityRetrievedEvent: on_entity_retrieved,
        EntityDeletedEvent: on_entity_deleted,
    }
    for event_type, handler in handlers.items():
        bus.subscribe(event_type, handler)
    logger.info("Registered localization lifecycle handlers")
    return handlers
