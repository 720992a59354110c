"""SQLite repository implementations."""

from collection_player.infrastructure.persistence.repositories.track_store import (
    SQLiteTrackStore,
)

__all__ = [
    "SQLiteTrackStore",
]
