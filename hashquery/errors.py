"""Error taxonomy for the query engine, with context preserved for debugging."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass
class ErrorContext:
    """Context information attached to an error."""

    collection: Optional[str] = None
    name: Optional[str] = None
    record: Optional[Dict[str, Any]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary."""
        return {
            "collection": self.collection,
            "name": self.name,
            "record": self.record,
            "metadata": self.metadata,
        }


class HashQueryError(Exception):
    """Base exception for all query engine errors."""

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.cause = cause

    @property
    def collection(self) -> Optional[str]:
        return self.context.collection

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "error_message": self.message,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class ScopeError(HashQueryError):
    """A registered scope failed or was declared incorrectly."""

    def __init__(
        self,
        message: str,
        scope_name: Optional[str] = None,
        collection: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            context=ErrorContext(collection=collection, name=scope_name),
            cause=cause,
        )
        self.scope_name = scope_name

    @classmethod
    def from_failure(cls, scope_name: str, collection: str, error: BaseException) -> "ScopeError":
        return cls(
            f"Error in scope '{scope_name}' for collection '{collection}': {error}",
            scope_name=scope_name,
            collection=collection,
            cause=error,
        )


class RelationError(HashQueryError):
    """A relation is unknown, unsupported or cannot be resolved."""

    def __init__(
        self,
        message: str,
        relation_name: Optional[str] = None,
        collection: Optional[str] = None,
    ):
        super().__init__(message, context=ErrorContext(collection=collection, name=relation_name))
        self.relation_name = relation_name


class InstanceError(HashQueryError):
    """A derived-value capability raised while computing its value."""

    def __init__(
        self,
        message: str,
        capability_name: Optional[str] = None,
        collection: Optional[str] = None,
        record: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            context=ErrorContext(
                collection=collection,
                name=capability_name,
                record=dict(record) if record is not None else None,
            ),
            cause=cause,
        )
        self.capability_name = capability_name

    @classmethod
    def from_failure(
        cls,
        capability_name: str,
        collection: str,
        record: Mapping[str, Any],
        error: BaseException,
    ) -> "InstanceError":
        return cls(
            f"Error executing capability '{capability_name}' on {collection} "
            f"record {dict(record)!r}: {error}",
            capability_name=capability_name,
            collection=collection,
            record=record,
            cause=error,
        )


class ArgumentError(HashQueryError, ValueError):
    """An operation received an invalid argument."""


class ImmutabilityError(HashQueryError):
    """Attempted write through a read-only record view."""


class CollectionNotDefinedError(HashQueryError, LookupError):
    """A query was requested for a collection that was never defined."""

    def __init__(self, collection: str):
        super().__init__(
            f"Collection '{collection}' not defined. "
            f"Use define('{collection}', ...) to define it.",
            context=ErrorContext(collection=collection),
        )


class DefinitionError(HashQueryError):
    """A collection definition received invalid input."""


class DataFileError(HashQueryError):
    """A data file could not be found, read or interpreted."""

    def __init__(self, message: str, path: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message, context=ErrorContext(metadata={"path": path} if path else {}), cause=cause)
        self.path = path
