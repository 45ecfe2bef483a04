# File: localizable/schemas/localization.py

"""
Pydantic schemas for the localization API.

Read endpoints return plain nested mappings (``{locale: {field: value}}``);
the schemas here cover single records, request bodies, and admin responses.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Nested mappings returned by the read endpoints
LocaleFieldValues = Dict[str, Dict[str, Optional[str]]]
FieldValues = Dict[str, Optional[str]]


class LocalizationResponse(BaseModel):
    """A stored localization record."""

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    id: int = Field(..., description="Localization record ID", examples=[456])
    model_type: str = Field(..., description="Owning entity type", examples=["Post"])
    model_id: int = Field(..., description="Owning entity ID", examples=[123])
    locale: str = Field(..., description="Locale code", examples=["fr"])
    field: str = Field(..., description="Localized field name", examples=["title"])
    value: Optional[str] = Field(None, description="Localized text, null when not yet set")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class LocalizeRequest(BaseModel):
    """Body for setting a single field."""

    value: Optional[str] = Field(
        None,
        description="Localized text; null marks the field as not yet set",
        examples=["Titre en français"],
    )


class ResolvedValueResponse(BaseModel):
    """A field value after localization, native default, and fallback resolution."""

    entity_type: str
    entity_id: int
    locale: str
    field: str
    value: Optional[str] = None


class CleanupRequest(BaseModel):
    """IDs of entities that still exist; localizations of any other ID are orphaned."""

    valid_entity_ids: List[int] = Field(default_factory=list)
    dry_run: bool = Field(True, description="Only report what would be deleted")

    @field_validator("valid_entity_ids")
    @classmethod
    def validate_unique_ids(cls, v: List[int]) -> List[int]:
        return sorted(set(v))


class CleanupResponse(BaseModel):
    entity_type: str
    dry_run: bool
    valid_entities: int
    orphaned_localizations: int
    orphaned_entity_ids: List[int]
    action: str


class LocalizationStatsResponse(BaseModel):
    """Statistics about stored localizations."""

    total_localizations: int = Field(..., ge=0)
    filled_localizations: int = Field(..., ge=0, description="Records with a non-null value")
    unique_entities: int = Field(..., ge=0)
    by_locale: Dict[str, int] = Field(default_factory=dict)
    by_entity_type: Dict[str, int] = Field(default_factory=dict)
    latest_update: Optional[str] = None
    supported_locales: List[str] = Field(default_factory=list)
    entity_types: List[str] = Field(default_factory=list)
