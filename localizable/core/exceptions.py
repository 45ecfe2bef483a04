# File: localizable/core/exceptions.py

from typing import Dict, Any, List, Optional
from datetime import datetime


class LocalizableException(Exception):
    """Base exception for all Localizable errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize a Localizable exception.

        Args:
            message: Human-readable error message
            code: Optional machine-processable error code
            details: Additional error details
        """
        self.message = message
        self.code = code or "GENERIC_ERROR"
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for API responses.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "timestamp": datetime.now().isoformat(),
        }


# Validation exceptions
class ValidationException(LocalizableException):
    """Raised when input validation fails, e.g. a field that is not localizable."""

    def __init__(
        self, message: str, validation_errors: Optional[Dict[str, List[str]]] = None
    ):
        super().__init__(
            message, "VALIDATION_001", {"validation_errors": validation_errors or {}}
        )

    @property
    def validation_errors(self) -> Dict[str, List[str]]:
        return self.details.get("validation_errors", {})


class UnsupportedEntityTypeException(ValidationException):
    """Raised when an entity type has no localizable-field declaration."""

    def __init__(self, entity_type: str):
        super().__init__(
            f"Entity type '{entity_type}' declares no localizable fields",
            {"entity_type": [f"Unsupported entity type: {entity_type}"]},
        )
        self.entity_type = entity_type


class FieldNotLocalizableException(ValidationException):
    """Raised when writing to fields outside an entity's declared localizable set."""

    def __init__(self, entity_type: str, fields: List[str], allowed: List[str]):
        if len(fields) == 1:
            message = f'Field "{fields[0]}" is not localizable'
        else:
            message = "Fields " + ", ".join(f'"{f}"' for f in fields) + " are not localizable"
        super().__init__(
            f"{message} for {entity_type}. Localizable: {allowed}",
            {field: [f"Not localizable for {entity_type}"] for field in fields},
        )
        self.entity_type = entity_type
        self.fields = fields


# Storage exceptions
class StorageException(LocalizableException):
    """
    Raised for any persistence-layer failure.

    The original driver error is kept in ``details`` and chained as
    ``__cause__``; no retry is attempted.
    """

    CODE_PREFIX = "STORAGE_"

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        super().__init__(message, f"{self.CODE_PREFIX}001", error_details)
