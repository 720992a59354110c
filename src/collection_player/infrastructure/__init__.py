"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite database and track store)
"""

from collection_player.infrastructure.persistence.database import Database

__all__ = [
    "Database",
]
