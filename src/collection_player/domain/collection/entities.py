"""Core domain entities for the collection bounded context."""

from __future__ import annotations

from typing import NamedTuple

from pydantic import BaseModel, ConfigDict

from collection_player.domain.collection.value_objects import PositionWrite
from collection_player.domain.shared.datetime_utils import format_duration
from collection_player.domain.shared.types import (
    AudioIdStr,
    CollectionIdStr,
    DurationSeconds,
    NonEmptyStr,
    PositionInt,
    TrackRefIdStr,
    UtcDatetimeField,
)


class TrackRef(BaseModel):
    """One playable membership of an audio asset in a collection."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: TrackRefIdStr
    audio_id: AudioIdStr
    position: PositionInt
    duration_seconds: DurationSeconds | None = None
    collection_id: CollectionIdStr | None = None

    # Display metadata joined from the audio asset
    title: NonEmptyStr | None = None
    artist: NonEmptyStr | None = None

    # Tie-break key when two refs share a position
    created_at: UtcDatetimeField | None = None

    @property
    def duration_formatted(self) -> str:
        return format_duration(self.duration_seconds)

    @property
    def display_title(self) -> str:
        title = self.title or self.audio_id
        if self.artist:
            return f"{title} - {self.artist}"
        return title

    def with_position(self, position: int) -> TrackRef:
        """Return a copy of this ref at a new position."""
        return self.model_copy(update={"position": position})


OrderedSequence = tuple[TrackRef, ...]
"""Track refs sorted ascending by position."""


class OrderingChange(NamedTuple):
    """Result of a ledger mutation: the new ordering and the writes it needs."""

    sequence: OrderedSequence
    writes: tuple[PositionWrite, ...]

    @property
    def updated_sequence(self) -> OrderedSequence:
        return self.sequence
