"""Collection Session Service - one viewer's ordering and playback of a collection."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ...domain.collection.coordinator import PlaybackCoordinator, PlaybackCursor
from ...domain.collection.entities import OrderedSequence, TrackRef
from ...domain.collection.ledger import PositionLedger
from ...domain.collection.services import CollectionDomainService
from ...domain.collection.value_objects import PlaybackStatus
from ...domain.shared.events import (
    CollectionFinished,
    EventBus,
    OrderingReloaded,
    PlaybackFailed,
    TrackRefAdded,
    TrackRefMoved,
    TrackRefRemoved,
    TrackSelected,
    get_event_bus,
)
from ...domain.shared.exceptions import DomainError, PartialOrderingWriteError
from ...domain.shared.messages import ErrorMessages, LogTemplates
from .session_models import CollectionInfo

if TYPE_CHECKING:
    from ...config.settings import CollectionSettings
    from ...domain.collection.repository import TrackStore
    from ...domain.collection.value_objects import PositionWrite
    from ..interfaces.media_backend import MediaBackend

logger = logging.getLogger(__name__)


class CollectionSessionService:
    """Owns the ledger and coordinator of one collection for one viewing session.

    Structural edits are serialized: each holds the edit lock until its write
    batch has completed. Media signals are applied in arrival order, and
    signals tagged with a superseded load request are dropped.
    """

    def __init__(
        self,
        *,
        collection_id: str,
        track_store: TrackStore,
        media_backend: MediaBackend,
        settings: CollectionSettings | None = None,
        event_bus: EventBus | None = None,
        collection_domain_service: type[CollectionDomainService] = CollectionDomainService,
    ) -> None:
        self._collection_id = collection_id
        self._store = track_store
        self._media = media_backend
        self._event_bus = event_bus or get_event_bus()
        self._rules = collection_domain_service

        self._max_tracks = settings.max_tracks if settings else None
        heal = settings.heal_duplicate_positions if settings else True
        self._ledger = PositionLedger(collection_id, strict=not heal)
        self._coordinator = PlaybackCoordinator.from_ledger(self._ledger)

        self._edit_lock = asyncio.Lock()
        self._opened = False
        self._public_only = False

        # Every media load gets a fresh request id; only the latest one counts.
        self._request_id = 0
        self._loaded_selection = 0

        self._media.set_signal_callbacks(
            on_ready=self._on_media_ready,
            on_ended=self._on_media_ended,
            on_error=self._on_media_error,
        )

    @property
    def collection_id(self) -> str:
        return self._collection_id

    @property
    def ledger(self) -> PositionLedger:
        return self._ledger

    @property
    def coordinator(self) -> PlaybackCoordinator:
        return self._coordinator

    @property
    def ordering(self) -> OrderedSequence:
        return self._ledger.snapshot()

    @property
    def cursor(self) -> PlaybackCursor:
        return self._coordinator.cursor

    @property
    def current_request_id(self) -> int:
        return self._request_id

    # === Lifecycle ===

    async def open(self, *, public_only: bool = False) -> OrderedSequence:
        """Hydrate the ordering from the track store.

        ``public_only`` is the embed viewer's mode: private collections are
        reported as not found.
        """
        async with self._edit_lock:
            self._public_only = public_only
            await self._hydrate()
            self._opened = True
        logger.info(LogTemplates.SESSION_OPENED, self._collection_id, len(self._ledger))
        return self._ledger.snapshot()

    async def reload(self) -> OrderedSequence:
        self._ensure_open()
        async with self._edit_lock:
            await self._hydrate()
        await self._event_bus.publish(
            OrderingReloaded(
                collection_id=self._collection_id,
                track_count=len(self._ledger),
                reason="requested",
            )
        )
        return self._ledger.snapshot()

    async def close(self) -> None:
        await self._media.stop()
        self._coordinator.stop()
        self._opened = False

    # === Structural edits ===

    async def add_track(self, audio_id: str, at_index: int | None = None) -> TrackRef:
        """Add an audio asset to the collection, appending unless ``at_index`` is given."""
        self._ensure_open()
        async with self._edit_lock:
            self._rules.validate_can_add(
                self._ledger.snapshot(), audio_id, max_tracks=self._max_tracks
            )

            index = len(self._ledger) if at_index is None else at_index
            created = await self._store.insert_track_ref(
                self._collection_id, audio_id, self._ledger.next_position()
            )
            change = self._ledger.insert(created, index)
            await self._apply_ordering(change.sequence)

            # The row was created at its append position already.
            writes = [
                write
                for write in change.writes
                if not (write.track_ref_id == created.id and write.position == created.position)
            ]
            await self._flush(writes)

            inserted_index = self._ledger.index_of(created.id)
            inserted = self._ledger.get(created.id)

        logger.info(
            LogTemplates.SESSION_TRACK_ADDED, audio_id, self._collection_id, inserted_index
        )
        await self._event_bus.publish(
            TrackRefAdded(
                collection_id=self._collection_id,
                track_ref_id=inserted.id,
                audio_id=audio_id,
                index=inserted_index,
            )
        )
        return inserted

    async def remove_track(self, track_ref_id: str) -> None:
        self._ensure_open()
        async with self._edit_lock:
            index = self._ledger.index_of(track_ref_id)
            change = self._ledger.remove(track_ref_id)
            await self._apply_ordering(change.sequence)
            try:
                await self._store.delete_track_ref(track_ref_id)
            except DomainError:
                await self._reload_after_failure()
                raise

        logger.info(LogTemplates.SESSION_TRACK_REMOVED, track_ref_id, self._collection_id)
        await self._event_bus.publish(
            TrackRefRemoved(
                collection_id=self._collection_id, track_ref_id=track_ref_id, index=index
            )
        )

    async def move_track(self, track_ref_id: str, to_index: int) -> OrderedSequence:
        self._ensure_open()
        async with self._edit_lock:
            from_index = self._ledger.index_of(track_ref_id)
            change = self._ledger.reorder(track_ref_id, to_index)
            await self._apply_ordering(change.sequence)
            await self._flush(change.writes)
            new_index = self._ledger.index_of(track_ref_id)

        logger.info(LogTemplates.SESSION_TRACK_MOVED, track_ref_id, new_index, self._collection_id)
        await self._event_bus.publish(
            TrackRefMoved(
                collection_id=self._collection_id,
                track_ref_id=track_ref_id,
                from_index=from_index,
                to_index=new_index,
            )
        )
        return change.sequence

    # === Playback controls ===

    async def select_track(self, index: int) -> PlaybackCursor:
        cursor = self._coordinator.select_track(index)
        await self._sync_media()
        await self._publish_selected(auto_advanced=False)
        return cursor

    async def skip_next(self) -> bool:
        if not self._coordinator.skip_next():
            return False
        await self._sync_media()
        await self._publish_selected(auto_advanced=False)
        return True

    async def skip_previous(self) -> bool:
        if not self._coordinator.skip_previous():
            return False
        await self._sync_media()
        await self._publish_selected(auto_advanced=False)
        return True

    async def pause(self) -> bool:
        if not self._coordinator.pause():
            return False
        await self._media.pause()
        return True

    async def resume(self) -> bool:
        if not self._coordinator.resume():
            return False
        await self._media.resume()
        return True

    async def stop(self) -> bool:
        if not self._coordinator.stop():
            return False
        await self._media.stop()
        return True

    def get_collection_info(self) -> CollectionInfo:
        ordering = self._coordinator.ordering
        return CollectionInfo(
            collection_id=self._collection_id,
            tracks=list(ordering),
            cursor=self._coordinator.cursor,
            total_duration_seconds=self._rules.get_total_duration(ordering),
            total_duration_formatted=self._rules.format_total_duration(ordering),
        )

    # === Media backend signals ===
    #
    # Coordinator transitions run without awaiting, so signals are applied in
    # arrival order. Media calls and event publishing happen afterwards; a
    # backend may deliver the next signal from inside ``load``.

    async def _on_media_ready(self, request_id: int) -> None:
        if self._is_superseded("ready", request_id):
            return
        self._coordinator.notify_ready()

    async def _on_media_ended(self, request_id: int) -> None:
        if self._is_superseded("ended", request_id):
            return
        last = self._coordinator.active_track
        if not self._coordinator.notify_track_ended():
            return

        if self._coordinator.status == PlaybackStatus.ENDED:
            await self._event_bus.publish(
                CollectionFinished(
                    collection_id=self._collection_id,
                    last_track_ref_id=last.id if last else "",
                )
            )
            return

        await self._publish_selected(auto_advanced=True)
        await self._sync_media()

    async def _on_media_error(self, request_id: int) -> None:
        if self._is_superseded("error", request_id):
            return
        failed = self._coordinator.active_track
        index = self._coordinator.active_index
        if not self._coordinator.notify_error():
            return

        logger.warning(LogTemplates.PLAYBACK_MEDIA_ERROR, failed.id if failed else None)
        await self._event_bus.publish(
            PlaybackFailed(
                collection_id=self._collection_id,
                track_ref_id=failed.id if failed else "",
                index=index or 0,
            )
        )

    # === Internals ===

    def _ensure_open(self) -> None:
        if not self._opened:
            raise DomainError(
                ErrorMessages.SESSION_NOT_OPEN.format(collection_id=self._collection_id),
                code="SESSION_NOT_OPEN",
            )

    def _is_superseded(self, signal: str, request_id: int) -> bool:
        if request_id != self._request_id:
            logger.debug(LogTemplates.PLAYBACK_STALE_REQUEST, signal, request_id)
            return True
        return False

    async def _hydrate(self) -> None:
        tracks = await self._store.load_tracks(
            self._collection_id, public_only=self._public_only
        )
        ordering = self._ledger.load(tracks)
        await self._apply_ordering(ordering)
        await self._flush(self._ledger.corrective_writes, reload_on_failure=False)

    async def _reload_after_failure(self) -> None:
        logger.warning(LogTemplates.SESSION_RELOADED, self._collection_id)
        await self._hydrate()
        await self._event_bus.publish(
            OrderingReloaded(
                collection_id=self._collection_id,
                track_count=len(self._ledger),
                reason="write_failure",
            )
        )

    async def _apply_ordering(self, ordering: OrderedSequence) -> None:
        had_active = self._coordinator.active_index is not None
        self._coordinator.on_ordering_changed(ordering)

        if had_active and self._coordinator.active_index is None:
            await self._media.stop()
            return
        await self._sync_media()

    async def _sync_media(self) -> None:
        """Issue a media load when the coordinator made a selection not yet loaded."""
        selection = self._coordinator.selection_count
        if selection == self._loaded_selection:
            return
        self._loaded_selection = selection

        track = self._coordinator.active_track
        if track is None or self._coordinator.status != PlaybackStatus.LOADING:
            return

        self._request_id += 1
        await self._media.load(self._request_id, track.audio_id)

    async def _flush(
        self, writes: Sequence[PositionWrite], *, reload_on_failure: bool = True
    ) -> None:
        """Submit sibling writes concurrently; any failure fails the batch."""
        if not writes:
            return

        results = await asyncio.gather(
            *(self._store.apply_position_writes(self._collection_id, [w]) for w in writes),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result

        failures = [r for r in results if isinstance(r, Exception)]
        if not failures:
            return

        logger.warning(
            LogTemplates.SESSION_WRITES_FAILED, len(failures), len(writes), self._collection_id
        )
        if reload_on_failure:
            await self._reload_after_failure()
        raise PartialOrderingWriteError(
            self._collection_id,
            applied=len(writes) - len(failures),
            failed=len(failures),
        ) from failures[0]

    async def _publish_selected(self, *, auto_advanced: bool) -> None:
        track = self._coordinator.active_track
        if track is None:
            return
        await self._event_bus.publish(
            TrackSelected(
                collection_id=self._collection_id,
                track_ref_id=track.id,
                index=self._coordinator.active_index or 0,
                auto_advanced=auto_advanced,
            )
        )
