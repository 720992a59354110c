"""SQLite implementation of the track store."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from collection_player.domain.collection.entities import TrackRef
from collection_player.domain.collection.repository import TrackStore
from collection_player.domain.shared.constants import DatabaseTables
from collection_player.domain.shared.datetime_utils import UtcDateTime
from collection_player.domain.shared.exceptions import (
    EntityNotFoundError,
    TrackRefNotFoundError,
    WriteConflictError,
)
from collection_player.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from collection_player.domain.collection.value_objects import PositionWrite

    from ..database import Database

logger = logging.getLogger(__name__)

_TRACK_SELECT = """
    SELECT ct.id, ct.collection_id, ct.audio_id, ct.position, ct.created_at,
           af.title, af.artist, af.duration_seconds
    FROM collection_tracks ct
    JOIN audio_files af ON af.id = ct.audio_id
"""


class SQLiteTrackStore(TrackStore):
    def __init__(self, database: Database) -> None:
        self._db = database

    # === Collaborator contract ===

    async def load_tracks(self, collection_id: str, *, public_only: bool = False) -> list[TrackRef]:
        collection = await self._db.fetch_one(
            "SELECT id, is_public FROM collections WHERE id = ?",
            (collection_id,),
        )
        if collection is None or (public_only and not collection["is_public"]):
            raise EntityNotFoundError("Collection", collection_id)

        rows = await self._db.fetch_all(
            _TRACK_SELECT + " WHERE ct.collection_id = ? ORDER BY ct.position ASC, ct.created_at ASC",
            (collection_id,),
        )
        tracks = [self._row_to_track_ref(row) for row in rows]
        logger.debug(LogTemplates.STORE_TRACKS_LOADED, len(tracks), collection_id)
        return tracks

    async def apply_position_writes(
        self, collection_id: str, writes: Sequence[PositionWrite]
    ) -> None:
        if not writes:
            return

        async with self._db.transaction() as conn:
            for write in writes:
                cursor = await conn.execute(
                    "UPDATE collection_tracks SET position = ? WHERE id = ? AND collection_id = ?",
                    (write.position, write.track_ref_id, collection_id),
                )
                if cursor.rowcount == 0:
                    raise WriteConflictError(
                        collection_id,
                        f"Track ref '{write.track_ref_id}' no longer exists in "
                        f"collection '{collection_id}'",
                    )

        logger.debug(LogTemplates.STORE_WRITES_APPLIED, len(writes), collection_id)

    async def insert_track_ref(self, collection_id: str, audio_id: str, position: int) -> TrackRef:
        if not await self._exists(DatabaseTables.COLLECTIONS, collection_id):
            raise EntityNotFoundError("Collection", collection_id)
        if not await self._exists(DatabaseTables.AUDIO_FILES, audio_id):
            raise EntityNotFoundError("AudioFile", audio_id)

        track_ref_id = str(uuid4())
        await self._db.execute(
            """
            INSERT INTO collection_tracks (id, collection_id, audio_id, position, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (track_ref_id, collection_id, audio_id, position, UtcDateTime.now().iso),
        )
        logger.info(
            LogTemplates.STORE_TRACK_INSERTED, track_ref_id, audio_id, position, collection_id
        )

        row = await self._db.fetch_one(_TRACK_SELECT + " WHERE ct.id = ?", (track_ref_id,))
        assert row is not None
        return self._row_to_track_ref(row)

    async def delete_track_ref(self, track_ref_id: str) -> None:
        async with self._db.transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM collection_tracks WHERE id = ?",
                (track_ref_id,),
            )
            deleted = cursor.rowcount
        if deleted == 0:
            raise TrackRefNotFoundError(track_ref_id)
        logger.info(LogTemplates.STORE_TRACK_DELETED, track_ref_id)

    # === Audio / collection records ===

    async def register_audio(
        self,
        title: str,
        *,
        artist: str | None = None,
        duration_seconds: int | None = None,
        audio_id: str | None = None,
    ) -> str:
        """Record an uploaded audio asset and return its id."""
        audio_id = audio_id or str(uuid4())
        await self._db.execute(
            """
            INSERT INTO audio_files (id, title, artist, duration_seconds, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (audio_id, title, artist, duration_seconds, UtcDateTime.now().iso),
        )
        return audio_id

    async def create_collection(
        self,
        title: str,
        *,
        description: str | None = None,
        is_public: bool = True,
        collection_id: str | None = None,
    ) -> str:
        collection_id = collection_id or str(uuid4())
        await self._db.execute(
            """
            INSERT INTO collections (id, title, description, is_public, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (collection_id, title, description, int(is_public), UtcDateTime.now().iso),
        )
        return collection_id

    # === Helpers ===

    async def _exists(self, table: str, row_id: str) -> bool:
        row = await self._db.fetch_one(
            f"SELECT 1 FROM {table} WHERE id = ?",  # noqa: S608
            (row_id,),
        )
        return row is not None

    def _row_to_track_ref(self, row: dict[str, Any]) -> TrackRef:
        created_at = row.get("created_at")
        return TrackRef(
            id=row["id"],
            collection_id=row["collection_id"],
            audio_id=row["audio_id"],
            position=int(row["position"]),
            duration_seconds=row["duration_seconds"],
            title=row["title"] or None,
            artist=row["artist"] or None,
            created_at=UtcDateTime.from_iso(created_at).dt if created_at else None,
        )
