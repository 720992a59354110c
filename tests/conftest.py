from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio

# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from collection_player.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def track_store(in_memory_database):
    """Create a track store with in-memory database."""
    from collection_player.infrastructure.persistence.repositories.track_store import (
        SQLiteTrackStore,
    )

    return SQLiteTrackStore(in_memory_database)


@pytest_asyncio.fixture
async def seeded_collection(track_store):
    """A public collection with three audio files added at positions 0, 1, 2."""
    collection_id = await track_store.create_collection("Road Trip", collection_id="col-1")
    audio_ids = []
    for index, (title, duration) in enumerate([("Intro", 60), ("Verse", 120), ("Outro", 90)]):
        audio_id = await track_store.register_audio(
            title, artist="Band", duration_seconds=duration, audio_id=f"audio-{index}"
        )
        await track_store.insert_track_ref(collection_id, audio_id, index)
        audio_ids.append(audio_id)
    return collection_id, audio_ids


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


@pytest.fixture
def make_ref():
    """Factory for track refs: make_ref("a", 0) -> TrackRef(id="a", audio_id="audio-a", ...)."""
    from collection_player.domain.collection.entities import TrackRef

    base = datetime(2024, 1, 1, tzinfo=UTC)

    def _make(ref_id: str, position: int, *, age: int | None = None, **kwargs) -> TrackRef:
        if age is not None:
            kwargs["created_at"] = base + timedelta(seconds=age)
        kwargs.setdefault("duration_seconds", 180)
        return TrackRef(id=ref_id, audio_id=f"audio-{ref_id}", position=position, **kwargs)

    return _make


@pytest.fixture
def abc_ordering(make_ref):
    """Ordering [A, B, C] at positions 0, 1, 2."""
    return (make_ref("A", 0), make_ref("B", 1), make_ref("C", 2))


@pytest.fixture(autouse=True)
def _reset_event_bus():
    from collection_player.domain.shared.events import reset_event_bus

    reset_event_bus()
    yield
    reset_event_bus()
