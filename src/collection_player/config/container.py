"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the database, track store and event bus, and
building one collection session per viewer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..application.interfaces.media_backend import MediaBackend
    from ..application.services.collection_session import CollectionSessionService
    from ..domain.collection.repository import TrackStore
    from ..domain.shared.events import EventBus
    from ..infrastructure.persistence.database import Database
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Shared components are lazily initialized when first accessed. Sessions
    are never shared, so :meth:`create_session` builds a new one per call.
    """

    settings: Settings

    # Persistence layer
    _database: Database | None = None
    _track_store: TrackStore | None = None

    # Cross-cutting
    _event_bus: EventBus | None = None

    # === Database ===

    @property
    def database(self) -> Database:
        """Get the database connection manager."""
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    # === Repositories ===

    @property
    def track_store(self) -> TrackStore:
        """Get the track store."""
        if self._track_store is None:
            from ..infrastructure.persistence.repositories.track_store import SQLiteTrackStore

            self._track_store = SQLiteTrackStore(self.database)
        return self._track_store

    # === Events ===

    @property
    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            from ..domain.shared.events import get_event_bus

            self._event_bus = get_event_bus()
        return self._event_bus

    # === Sessions ===

    def create_session(
        self, collection_id: str, media_backend: MediaBackend
    ) -> CollectionSessionService:
        """Build a session for one viewer of ``collection_id``."""
        from ..application.services.collection_session import CollectionSessionService

        return CollectionSessionService(
            collection_id=collection_id,
            track_store=self.track_store,
            media_backend=media_backend,
            settings=self.settings.collection,
            event_bus=self.event_bus,
        )

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize all async resources."""
        await self.database.initialize()

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        if self._database is not None:
            await self._database.close()

        self._track_store = None
        self._database = None
        self._event_bus = None


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
