"""Data layer error hierarchy."""

from hammock.errors import HammockError


class DataError(HammockError):
    """Base for all hammock.data errors."""


class QueryError(DataError):
    """Raised when a statement is malformed or the SQL fails."""


class StorageNotConfiguredError(DataError):
    """Raised when a model is used before a database is bound to it."""


class RecordNotFoundError(DataError):
    """Raised when a lookup by identifier finds no row."""


class PreconditionError(DataError):
    """Raised when an entity operation is not valid in its current state."""


class EntityDeletedError(PreconditionError):
    """Raised when a deleted entity is mutated, saved, or deleted again."""


class DomainError(DataError):
    """Raised when a schema declares a type hammock cannot coerce.

    Indicates a misconfigured model, not bad data.
    """
