"""
Collection Bounded Context

Track ordering within a collection and sequential playback over it.
"""

from collection_player.domain.collection.coordinator import PlaybackCoordinator, PlaybackCursor
from collection_player.domain.collection.entities import OrderedSequence, OrderingChange, TrackRef
from collection_player.domain.collection.ledger import PositionLedger
from collection_player.domain.collection.repository import TrackStore
from collection_player.domain.collection.services import CollectionDomainService
from collection_player.domain.collection.value_objects import PlaybackStatus, PositionWrite

__all__ = [
    # Entities
    "TrackRef",
    "OrderedSequence",
    "OrderingChange",
    # Value Objects
    "PositionWrite",
    "PlaybackStatus",
    # Engine
    "PositionLedger",
    "PlaybackCoordinator",
    "PlaybackCursor",
    # Repository
    "TrackStore",
    # Services
    "CollectionDomainService",
]
