"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Cross-cutting types, exceptions and events
- collection/: Track ordering and playback coordination
"""

from collection_player.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
