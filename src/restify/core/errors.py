"""
Structured error types for Restify.

Every failure raised by the schema resolver, the statement layer, the
configuration loader and the database connection extends ``RestifyError``.
Errors carry a category, a retry flag, structured context and an optional
chained cause so callers can log them without losing metadata.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                       RestifyError                          │
        │        (category, retryable, context, cause)                │
        ├─────────────────────────────────────────────────────────────┤
        │                                                             │
        │  ValidationError        ConfigError        DatabaseError    │
        │  (VALIDATION)           (CONFIG)           (DATABASE)       │
        │       │                     │                   │           │
        │  SchemaError           DuplicateNameError   QueryError      │
        │   ├ UnknownRelationKind MissingConfigError                  │
        │   ├ UnknownCollectionReference                              │
        │   └ RelationNameConflict                                    │
        │                                                             │
        │  DatabaseConnectionError (DATABASE, retryable)              │
        └─────────────────────────────────────────────────────────────┘

Schema errors are structural: they abort construction of a ``Restify``
service and are never retried. Database errors propagate to the caller of
``reset``/``sync``/CRUD after the connection has been released. Nothing in
this package retries automatically; ``retryable`` is a hint for callers.

Examples:
    >>> error = UnknownCollectionReference("Team")
    >>> error.with_context(collection="User", field="team").context.field
    'team'
    >>> error.to_dict()["category"]
    'VALIDATION'
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    DATABASE = "DATABASE"  # Connection, statement execution
    VALIDATION = "VALIDATION"  # Schema shape, relation consistency
    CONFIG = "CONFIG"  # Missing or invalid settings
    INTERNAL = "INTERNAL"  # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        collection: Collection involved in the failure.
        field: Field involved in the failure.
        table: Table a statement targeted.
        statement: SQL text that failed.
        metadata: Additional key-value pairs.
    """

    collection: str | None = None
    field: str | None = None
    table: str | None = None
    statement: str | None = None

    metadata: dict[str, Any] = dataclass_field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["collection", "field", "table", "statement"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class RestifyError(Exception):
    """
    Base exception for all Restify errors.

    Subclasses set ``default_category`` and ``default_retryable``; both can be
    overridden per instance.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RestifyError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SchemaError("Bad field").with_context(
                collection="User",
                field="profile",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# VALIDATION / SCHEMA ERRORS
# =============================================================================


class ValidationError(RestifyError):
    """
    Declaration validation error.

    Never retryable - the declaration must be fixed.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


class SchemaError(ValidationError):
    """Schema document is structurally invalid."""


class UnknownRelationKind(SchemaError):
    """A relation tag is not one of the four recognised kinds."""

    def __init__(self, kind: Any, message: str | None = None, **kwargs: Any):
        self.kind = kind
        super().__init__(message or f"Undefined relation {kind!r}", **kwargs)


class UnknownCollectionReference(SchemaError):
    """A relation or introspection call names a collection absent from the schema."""

    def __init__(self, name: str, message: str | None = None, **kwargs: Any):
        self.name = name
        super().__init__(message or f"Unknown collection {name!r}", **kwargs)


class RelationNameConflict(SchemaError):
    """A derived inverse field would overwrite an existing field."""

    def __init__(self, collection: str, field: str, message: str | None = None, **kwargs: Any):
        self.collection = collection
        self.field = field
        super().__init__(
            message or f"Field {field!r} already exists on collection {collection!r}",
            **kwargs,
        )
        self.context.collection = collection
        self.context.field = field


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(RestifyError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class MissingConfigError(ConfigError):
    """Required configuration is missing."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}")


class DuplicateNameError(ConfigError):
    """A collection or field name is declared twice in the same mapping."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Duplicate name in configuration: {key!r}")


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(RestifyError):
    """Failure reported by the database connection."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class QueryError(DatabaseError):
    """A statement failed to execute."""


class DatabaseConnectionError(DatabaseError):
    """The database could not be reached."""

    default_retryable = True


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "RestifyError",
    "ValidationError",
    "SchemaError",
    "UnknownRelationKind",
    "UnknownCollectionReference",
    "RelationNameConflict",
    "ConfigError",
    "MissingConfigError",
    "DuplicateNameError",
    "DatabaseError",
    "QueryError",
    "DatabaseConnectionError",
]
