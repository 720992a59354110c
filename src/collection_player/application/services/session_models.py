"""DTOs for the collection session service."""

from __future__ import annotations

from pydantic import BaseModel

from ...domain.collection.coordinator import PlaybackCursor
from ...domain.collection.entities import TrackRef
from ...domain.shared.types import NonNegativeInt


class CollectionInfo(BaseModel):

    collection_id: str
    tracks: list[TrackRef]
    cursor: PlaybackCursor
    total_duration_seconds: NonNegativeInt | None
    total_duration_formatted: str

    @property
    def total_tracks(self) -> int:
        return len(self.tracks)

    @property
    def active_track(self) -> TrackRef | None:
        if self.cursor.active_index is None:
            return None
        return self.tracks[self.cursor.active_index]
