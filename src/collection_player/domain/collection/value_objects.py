"""Immutable value objects for the collection bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class PositionWrite:
    """A single position assignment the track store must persist."""

    track_ref_id: str
    position: int

    def __post_init__(self) -> None:
        if not self.track_ref_id:
            raise ValueError("Position write requires a track ref id")
        if self.position < 0:
            raise ValueError("Position cannot be negative")


class PlaybackStatus(Enum):
    """Status half of the playback cursor.

    Transitions:
    - IDLE -> LOADING (select)
    - LOADING -> PLAYING (media ready)
    - PLAYING <-> PAUSED (pause / resume)
    - LOADING | PLAYING | PAUSED -> LOADING (track ended, auto-advance)
    - LOADING | PLAYING | PAUSED -> ENDED (last track ended)
    - LOADING | PLAYING -> ERROR (media failure)
    - Any -> LOADING (explicit select), Any -> IDLE (ordering emptied / stop)
    """

    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"
    ERROR = "error"

    @property
    def is_active(self) -> bool:
        return self in {PlaybackStatus.LOADING, PlaybackStatus.PLAYING, PlaybackStatus.PAUSED}

    @property
    def can_fail(self) -> bool:
        return self in {PlaybackStatus.LOADING, PlaybackStatus.PLAYING}
