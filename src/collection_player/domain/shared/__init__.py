"""
Shared Domain Kernel

Contains constrained types, exceptions and events shared across the package.
"""

from collection_player.domain.shared.exceptions import (
    BusinessRuleViolationError,
    DomainError,
    EntityNotFoundError,
    IndexOutOfRangeError,
    MalformedOrderingError,
    PartialOrderingWriteError,
    TrackRefNotFoundError,
    WriteConflictError,
)

__all__ = [
    "DomainError",
    "EntityNotFoundError",
    "TrackRefNotFoundError",
    "BusinessRuleViolationError",
    "MalformedOrderingError",
    "IndexOutOfRangeError",
    "WriteConflictError",
    "PartialOrderingWriteError",
]
