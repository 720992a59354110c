"""Port interface for the media backend that actually plays audio."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

MediaSignalCallback = Callable[[int], Awaitable[None]]
"""Receives the request id passed to :meth:`MediaBackend.load`."""


class MediaBackend(ABC):
    """Interface for a player that turns an audio id into sound.

    A backend emits exactly three signals per load request: ready, ended and
    error. Ready precedes ended for a successful playback; nothing else about
    timing is guaranteed, and there is no way to cancel an in-flight load.
    """

    @abstractmethod
    async def load(self, request_id: int, audio_id: str) -> None:
        """Start loading ``audio_id``; signals for it carry ``request_id``."""
        ...

    @abstractmethod
    async def pause(self) -> None:
        ...

    @abstractmethod
    async def resume(self) -> None:
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Release the current playable handle."""
        ...

    @abstractmethod
    def set_signal_callbacks(
        self,
        *,
        on_ready: MediaSignalCallback,
        on_ended: MediaSignalCallback,
        on_error: MediaSignalCallback,
    ) -> None:
        """Set the callbacks for ready, ended and error signals."""
        ...
