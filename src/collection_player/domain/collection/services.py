"""Domain service for collection membership rules."""

from __future__ import annotations

from collection_player.domain.collection.entities import OrderedSequence
from collection_player.domain.shared.datetime_utils import format_duration
from collection_player.domain.shared.exceptions import BusinessRuleViolationError
from collection_player.domain.shared.messages import ErrorMessages


class CollectionDomainService:
    """Domain service for collection membership rules."""

    MAX_TRACKS = 500

    @classmethod
    def contains_audio(cls, ordering: OrderedSequence, audio_id: str) -> bool:
        return any(ref.audio_id == audio_id for ref in ordering)

    @classmethod
    def validate_can_add(
        cls, ordering: OrderedSequence, audio_id: str, *, max_tracks: int | None = None
    ) -> None:
        """Raise if ``audio_id`` may not be added to ``ordering``."""
        if cls.contains_audio(ordering, audio_id):
            raise BusinessRuleViolationError(
                rule="NO_DUPLICATES", message=ErrorMessages.DUPLICATE_AUDIO
            )

        limit = max_tracks or cls.MAX_TRACKS
        if len(ordering) >= limit:
            raise BusinessRuleViolationError(
                rule="MAX_COLLECTION_SIZE",
                message=ErrorMessages.COLLECTION_FULL.format(max_tracks=limit),
            )

    @classmethod
    def get_total_duration(cls, ordering: OrderedSequence) -> int | None:
        """Return total duration in seconds, or None if any track has unknown duration."""
        total = 0
        for ref in ordering:
            if ref.duration_seconds is None:
                return None
            total += ref.duration_seconds
        return total

    @classmethod
    def format_total_duration(cls, ordering: OrderedSequence) -> str:
        """Format the total collection duration as a human-readable string."""
        duration = cls.get_total_duration(ordering)
        if duration is None:
            return "Unknown"

        hours, remainder = divmod(duration, 3600)
        minutes, seconds = divmod(remainder, 60)

        if hours > 0:
            return f"{hours}h {minutes}m {seconds}s"
        elif minutes > 0:
            return f"{minutes}m {seconds}s"
        return f"{seconds}s"
