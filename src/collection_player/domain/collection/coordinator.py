"""Playback coordinator: the track-to-track state machine shared by every viewer."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from collection_player.domain.collection.entities import OrderedSequence, TrackRef
from collection_player.domain.collection.value_objects import PlaybackStatus
from collection_player.domain.shared.exceptions import IndexOutOfRangeError
from collection_player.domain.shared.messages import LogTemplates
from collection_player.domain.shared.types import NonNegativeInt

if TYPE_CHECKING:
    from collection_player.domain.collection.ledger import PositionLedger

logger = logging.getLogger(__name__)


class PlaybackCursor(BaseModel):
    """Snapshot of which track is active and what the player is doing."""

    model_config = ConfigDict(frozen=True)

    active_index: NonNegativeInt | None = None
    active_track_ref_id: str | None = None
    status: PlaybackStatus = PlaybackStatus.IDLE


class PlaybackCoordinator:
    """State machine over the current ordering.

    ``active_index`` points into the ordering the coordinator was last given;
    the active track ref id is kept alongside it so the index can be
    re-resolved when the ordering changes. Media signals may carry the index
    they were issued for; a signal for any other index is stale and ignored.
    """

    def __init__(self, ordering: OrderedSequence = ()) -> None:
        self._ordering: OrderedSequence = tuple(ordering)
        self._active_index: int | None = None
        self._active_id: str | None = None
        self._status = PlaybackStatus.IDLE
        self._selection_count = 0

    @classmethod
    def from_ledger(cls, ledger: PositionLedger) -> PlaybackCoordinator:
        return cls(ledger.snapshot())

    @property
    def ordering(self) -> OrderedSequence:
        return self._ordering

    @property
    def active_index(self) -> int | None:
        return self._active_index

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @property
    def selection_count(self) -> int:
        """Incremented on every selection, explicit or auto-advanced."""
        return self._selection_count

    @property
    def active_track(self) -> TrackRef | None:
        if self._active_index is None:
            return None
        return self._ordering[self._active_index]

    @property
    def cursor(self) -> PlaybackCursor:
        return PlaybackCursor(
            active_index=self._active_index,
            active_track_ref_id=self._active_id,
            status=self._status,
        )

    # === Caller transitions ===

    def select_track(self, index: int) -> PlaybackCursor:
        if not 0 <= index < len(self._ordering):
            raise IndexOutOfRangeError(index, len(self._ordering))
        self._select(index)
        return self.cursor

    def pause(self) -> bool:
        if self._status != PlaybackStatus.PLAYING:
            logger.debug(LogTemplates.PLAYBACK_IGNORED, "pause", self._status.value)
            return False
        self._set_status(PlaybackStatus.PAUSED)
        return True

    def resume(self) -> bool:
        if self._status != PlaybackStatus.PAUSED:
            logger.debug(LogTemplates.PLAYBACK_IGNORED, "resume", self._status.value)
            return False
        self._set_status(PlaybackStatus.PLAYING)
        return True

    def skip_next(self) -> bool:
        """Select the following track; False at the end of the ordering."""
        if self._active_index is None:
            if not self._ordering:
                return False
            self._select(0)
            return True
        if self._active_index >= len(self._ordering) - 1:
            return False
        self._select(self._active_index + 1)
        return True

    def skip_previous(self) -> bool:
        """Select the preceding track; False at the start of the ordering."""
        if not self._active_index:
            return False
        self._select(self._active_index - 1)
        return True

    def stop(self) -> bool:
        """Drop the active track and return to Idle."""
        if self._active_index is None and self._status == PlaybackStatus.IDLE:
            return False
        self._active_index = None
        self._active_id = None
        self._set_status(PlaybackStatus.IDLE)
        return True

    # === Media backend signals ===

    def notify_ready(self, index: int | None = None) -> bool:
        if self._is_stale("ready", index):
            return False
        if self._status != PlaybackStatus.LOADING:
            logger.debug(LogTemplates.PLAYBACK_IGNORED, "ready", self._status.value)
            return False
        self._set_status(PlaybackStatus.PLAYING)
        return True

    def notify_track_ended(self, index: int | None = None) -> bool:
        """Advance to the next track, or finish on the last one."""
        if self._is_stale("ended", index):
            return False
        if self._active_index is None or not self._status.is_active:
            logger.debug(LogTemplates.PLAYBACK_IGNORED, "ended", self._status.value)
            return False

        if self._active_index >= len(self._ordering) - 1:
            self._set_status(PlaybackStatus.ENDED)
            logger.info(LogTemplates.PLAYBACK_FINISHED, self._active_index)
        else:
            self._select(self._active_index + 1)
        return True

    def notify_error(self, index: int | None = None) -> bool:
        """Enter Error. Never auto-retried; the caller re-selects to recover."""
        if self._is_stale("error", index):
            return False
        if not self._status.can_fail:
            logger.debug(LogTemplates.PLAYBACK_IGNORED, "error", self._status.value)
            return False
        self._set_status(PlaybackStatus.ERROR)
        return True

    # === Ordering changes ===

    def on_ordering_changed(self, new_ordering: OrderedSequence) -> PlaybackCursor:
        """Re-resolve the active index against a new ordering.

        If the active ref survived, only its index moves. If it was removed, the
        entry now at the same numeric index (clamped) is selected, or the cursor
        goes Idle when nothing is left.
        """
        previous_index = self._active_index
        self._ordering = tuple(new_ordering)

        if self._active_id is None:
            if not self._ordering:
                self._set_status(PlaybackStatus.IDLE)
            return self.cursor

        for index, ref in enumerate(self._ordering):
            if ref.id == self._active_id:
                self._active_index = index
                return self.cursor

        removed_id = self._active_id
        if not self._ordering:
            self._active_index = None
            self._active_id = None
            self._set_status(PlaybackStatus.IDLE)
            return self.cursor

        index = min(previous_index or 0, len(self._ordering) - 1)
        logger.info(LogTemplates.PLAYBACK_RESELECTED, removed_id, index)
        self._select(index)
        return self.cursor

    # === Internals ===

    def _select(self, index: int) -> None:
        self._active_index = index
        self._active_id = self._ordering[index].id
        self._selection_count += 1
        self._set_status(PlaybackStatus.LOADING)
        logger.debug(LogTemplates.PLAYBACK_SELECTED, index, self._active_id)

    def _set_status(self, status: PlaybackStatus) -> None:
        if status != self._status:
            logger.debug(LogTemplates.PLAYBACK_STATUS, self._status.value, status.value)
        self._status = status

    def _is_stale(self, signal: str, index: int | None) -> bool:
        if index is not None and index != self._active_index:
            logger.debug(LogTemplates.PLAYBACK_STALE_SIGNAL, signal, index, self._active_index)
            return True
        return False
