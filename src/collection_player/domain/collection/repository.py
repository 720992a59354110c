"""
Collection Domain Repository Interfaces

Abstract base classes defining the track store contract the core consumes.
Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from collection_player.domain.collection.entities import TrackRef
from collection_player.domain.collection.value_objects import PositionWrite


class TrackStore(ABC):
    """Abstract durable store for collection track references.

    The ledger never calls this directly; a session service issues the
    writes the ledger returns and reloads from here when they fail.
    """

    @abstractmethod
    async def load_tracks(self, collection_id: str, *, public_only: bool = False) -> list[TrackRef]:
        """Load every track ref of a collection.

        Args:
            collection_id: The collection to load.
            public_only: Reject collections that are not public (embed viewer).

        Returns:
            The refs, in no guaranteed order.

        Raises:
            EntityNotFoundError: If the collection does not exist or is not
                visible.
        """
        ...

    @abstractmethod
    async def apply_position_writes(
        self, collection_id: str, writes: Sequence[PositionWrite]
    ) -> None:
        """Persist position assignments.

        Raises:
            WriteConflictError: If any write could not be applied.
        """
        ...

    @abstractmethod
    async def insert_track_ref(self, collection_id: str, audio_id: str, position: int) -> TrackRef:
        """Create a membership row and return it."""
        ...

    @abstractmethod
    async def delete_track_ref(self, track_ref_id: str) -> None:
        """Delete a membership row.

        Raises:
            TrackRefNotFoundError: If the row does not exist.
        """
        ...
