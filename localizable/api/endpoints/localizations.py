# File: localizable/api/endpoints/localizations.py

"""
Localization API Endpoints

Read endpoints return plain nested mappings produced by the localization
service; write endpoints restrict locales to the configured set.
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, Response, status

from localizable.api import deps
from localizable.core.exceptions import StorageException, ValidationException
from localizable.schemas.localization import (
    CleanupRequest,
    CleanupResponse,
    FieldValues,
    LocaleFieldValues,
    LocalizationResponse,
    LocalizationStatsResponse,
    LocalizeRequest,
    ResolvedValueResponse,
)
from localizable.services.localization_service import LocalizationService

logger = logging.getLogger(__name__)
router = APIRouter()


def _storage_unavailable(e: StorageException) -> HTTPException:
    logger.error(f"Storage error: {e}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Localization storage is unavailable"
    )


# System Configuration Endpoints
@router.get("/locales", response_model=Dict[str, str])
def get_supported_locales(
        localization_service: LocalizationService = Depends(deps.get_localization_service)
):
    """Configured locale codes mapped to their display names."""
    return localization_service.get_supported_locales()


@router.get("/stats", response_model=LocalizationStatsResponse)
def get_localization_statistics(
        localization_service: LocalizationService = Depends(deps.get_localization_service)
):
    """Counts of stored localizations by locale and entity type."""
    try:
        return localization_service.get_translation_statistics()
    except StorageException as e:
        raise _storage_unavailable(e)


@router.get("/{entity_type}/fields", response_model=List[str])
def get_localizable_fields(
        entity_type: str = Path(..., description="Entity type (e.g., 'Post')"),
        localization_service: LocalizationService = Depends(deps.get_localization_service)
):
    """Declared localizable fields of an entity type, in declaration order."""
    try:
        return localization_service.get_translatable_fields(entity_type)
    except ValidationException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{entity_type}/placeholders", response_model=LocaleFieldValues)
def get_placeholders(
        entity_type: str = Path(..., description="Entity type"),
        localization_service: LocalizationService = Depends(deps.get_localization_service)
):
    """Empty ``{locale: {field: null}}`` scaffold for building an input form."""
    try:
        return localization_service.get_localizables_for(entity_type)
    except ValidationException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{entity_type}/cleanup", response_model=CleanupResponse)
def cleanup_orphaned_localizations(
        entity_type: str = Path(..., description="Entity type to clean up"),
        request: CleanupRequest = Body(...),
        localization_service: LocalizationService = Depends(deps.get_localization_service)
):
    """Report, or with ``dry_run=false`` delete, localizations of entities that no longer exist."""
    try:
        return localization_service.cleanup_orphaned_localizations(
            entity_type, request.valid_entity_ids, request.dry_run
        )
    except StorageException as e:
        raise _storage_unavailable(e)


# Localization Management Endpoints
@router.get("/{entity_type}/{entity_id}", response_model=LocaleFieldValues)
def get_entity_localizations(
        entity_type: str = Path(..., description="Entity type"),
        entity_id: int = Path(..., description="Entity ID", gt=0),
        locales: Optional[List[str]] = Query(None, description="Restrict to these locales"),
        localization_service: LocalizationService = Depends(deps.get_localization_service)
):
    """
    Stored values of every declared field in every configured locale.

    No fallback is applied; missing values are null.
    """
    try:
        return localization_service.get_localizations((entity_type, entity_id), locales=locales)
    except ValidationException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageException as e:
        raise _storage_unavailable(e)


@router.put("/{entity_type}/{entity_id}", response_model=LocaleFieldValues)
def localize_many_locales(
        entity_type: str = Path(..., description="Entity type"),
        entity_id: int = Path(..., description="Entity ID", gt=0),
        localization_data: Dict[str, Dict[str, Optional[str]]] = Body(
            ..., examples=[{"en": {"title": "Title"}, "fr": {"title": "Titre"}}]
        ),
        localization_service: LocalizationService = Depends(deps.get_localization_service)
):
    """Set fields across several locales; either all values are stored or none."""
    try:
        for locale in localization_data:
            localization_service.validate_locale(locale)
        localization_service.localize_many_locales((entity_type, entity_id), localization_data)
        return localization_service.get_localizations((entity_type, entity_id))
    except ValidationException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageException as e:
        raise _storage_unavailable(e)


@router.delete("/{entity_type}/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entity_localizations(
        entity_type: str = Path(..., description="Entity type"),
        entity_id: int = Path(..., description="Entity ID", gt=0),
        localization_service: LocalizationService = Depends(deps.get_localization_service)
):
    """Delete every localization of an entity. Deleting an entity without localizations is a no-op."""
    try:
        deleted = localization_service.destroy_localizations((entity_type, entity_id))
        logger.info(f"Deleted {deleted} localizations of {entity_type}#{entity_id}")
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except StorageException as e:
        raise _storage_unavailable(e)


@router.get("/{entity_type}/{entity_id}/resolved", response_model=FieldValues)
def get_resolved_fields(
        entity_type: str = Path(..., description="Entity type"),
        entity_id: int = Path(..., description="Entity ID", gt=0),
        locale: str = Depends(deps.get_request_locale),
        localization_service: LocalizationService = Depends(deps.get_localization_service)
):
    """
    Every declared field resolved for the request locale.

    The locale comes from ``?locale=``, then Accept-Language, then the default
    locale. Without a native value, unset fields resolve to the fallback text.
    """
    try:
        return {
            field: localization_service.resolve((entity_type, entity_id), locale, field)
            for field in localization_service.get_translatable_fields(entity_type)
        }
    except ValidationException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageException as e:
        raise _storage_unavailable(e)


@router.put("/{entity_type}/{entity_id}/{locale}", response_model=FieldValues)
def localize_many(
        entity_type: str = Path(..., description="Entity type"),
        entity_id: int = Path(..., description="Entity ID", gt=0),
        locale: str = Path(..., description="Locale code"),
        fields: Dict[str, Optional[str]] = Body(..., examples=[{"title": "Titre", "body": "Corps"}]),
        localization_service: LocalizationService = Depends(deps.get_localization_service)
):
    """Set several fields of one locale; either all values are stored or none."""
    try:
        localization_service.validate_locale(locale)
        localization_service.localize_many((entity_type, entity_id), locale, fields)
        return localization_service.get_localizations((entity_type, entity_id), locales=[locale])[locale]
    except ValidationException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageException as e:
        raise _storage_unavailable(e)


@router.put("/{entity_type}/{entity_id}/{locale}/{field}", response_model=LocalizationResponse)
def localize_field(
        entity_type: str = Path(..., description="Entity type"),
        entity_id: int = Path(..., description="Entity ID", gt=0),
        locale: str = Path(..., description="Locale code"),
        field: str = Path(..., description="Localizable field name"),
        request: LocalizeRequest = Body(...),
        localization_service: LocalizationService = Depends(deps.get_localization_service)
):
    """Set the localized value of one field."""
    try:
        localization_service.validate_locale(locale)
        return localization_service.localize((entity_type, entity_id), locale, field, request.value)
    except ValidationException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageException as e:
        raise _storage_unavailable(e)


@router.get("/{entity_type}/{entity_id}/{locale}/{field}", response_model=ResolvedValueResponse)
def resolve_field(
        entity_type: str = Path(..., description="Entity type"),
        entity_id: int = Path(..., description="Entity ID", gt=0),
        locale: str = Path(..., description="Locale code"),
        field: str = Path(..., description="Field name"),
        default: Optional[str] = Query(None, description="The entity's native value for the field"),
        localization_service: LocalizationService = Depends(deps.get_localization_service)
):
    """Resolve one field: localized value, then ``default``, then fallback text."""
    try:
        value = localization_service.resolve((entity_type, entity_id), locale, field, default=default)
        return ResolvedValueResponse(
            entity_type=entity_type,
            entity_id=entity_id,
            locale=locale,
            field=field,
            value=value,
        )
    except StorageException as e:
        raise _storage_unavailable(e)
