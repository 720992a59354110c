"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class EntityNotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, identifier: str | int, message: str | None = None) -> None:
        msg = message or f"{entity_type} with id '{identifier}' not found"
        super().__init__(msg, code="ENTITY_NOT_FOUND")
        self.entity_type = entity_type
        self.identifier = identifier


class TrackRefNotFoundError(EntityNotFoundError):
    """Raised when an operation references a track absent from the current ordering."""

    def __init__(self, track_ref_id: str) -> None:
        super().__init__("TrackRef", track_ref_id)
        self.track_ref_id = track_ref_id


class BusinessRuleViolationError(DomainError):
    """Raised when a business rule is violated."""

    def __init__(self, rule: str, message: str | None = None) -> None:
        msg = message or f"Business rule violated: {rule}"
        super().__init__(msg, code="BUSINESS_RULE_VIOLATION")
        self.rule = rule


class MalformedOrderingError(DomainError):
    """Raised when a track listing cannot be turned into a consistent ordering."""

    def __init__(self, message: str, duplicates: tuple[str, ...] = ()) -> None:
        super().__init__(message, code="MALFORMED_ORDERING")
        self.duplicates = duplicates


class IndexOutOfRangeError(DomainError):
    """Raised when a caller selects an index outside the current ordering."""

    def __init__(self, index: int, length: int) -> None:
        super().__init__(
            f"Index {index} is out of range for an ordering of length {length}",
            code="INDEX_OUT_OF_RANGE",
        )
        self.index = index
        self.length = length


class WriteConflictError(DomainError):
    """Raised by a track store when a position write cannot be applied."""

    def __init__(self, collection_id: str, message: str | None = None) -> None:
        msg = message or f"Position write conflict in collection '{collection_id}'"
        super().__init__(msg, code="WRITE_CONFLICT")
        self.collection_id = collection_id


class PartialOrderingWriteError(DomainError):
    """Raised when part of a position write batch failed; the ordering was reloaded."""

    def __init__(self, collection_id: str, applied: int, failed: int) -> None:
        super().__init__(
            f"{failed} of {applied + failed} position writes failed in collection "
            f"'{collection_id}'; ordering reloaded",
            code="PARTIAL_ORDERING_WRITE",
        )
        self.collection_id = collection_id
        self.applied = applied
        self.failed = failed
