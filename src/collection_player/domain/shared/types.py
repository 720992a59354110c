"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type used across the package is defined here once,
so models can simply annotate their fields::

    from collection_player.domain.shared.types import NonEmptyStr, PositionInt

    class MyModel(BaseModel):
        name: NonEmptyStr
        position: PositionInt
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BeforeValidator, Field

# ── Numeric constraints ─────────────────────────────────────────────

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

PositionInt = Annotated[int, Field(ge=0)]
"""Collection-scoped ordering key. Not an array index."""

DurationSeconds = Annotated[int, Field(ge=0, le=86_400)]
"""Track duration in seconds: 0 … 86 400 (24 hours)."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

TrackRefIdStr = Annotated[str, Field(min_length=1, max_length=64)]
"""Stable identity of one (collection, audio) membership."""

AudioIdStr = Annotated[str, Field(min_length=1, max_length=64)]
"""Identifier of an externally owned audio asset."""

CollectionIdStr = Annotated[str, Field(min_length=1, max_length=64)]
"""Identifier of a collection."""


# ── Settings-specific constraints ──────────────────────────────────

BusyTimeoutMs = Annotated[int, Field(ge=1000, le=30000)]
"""Database busy timeout in milliseconds: 1 000 … 30 000."""

ConnectionTimeoutS = Annotated[int, Field(ge=1, le=60)]
"""Database connection timeout in seconds: 1 … 60."""

MaxCollectionSize = Annotated[int, Field(gt=0, le=10_000)]
"""Maximum tracks per collection: 1 … 10 000."""


# ── Datetime constraints ────────────────────────────────────────────

def _ensure_utc(v: datetime) -> datetime:
    """Validate that a datetime is timezone-aware and normalise to UTC."""
    if v.tzinfo is None:
        raise ValueError("datetime must be timezone-aware (UTC)")
    return v.astimezone(UTC)


UtcDatetimeField = Annotated[datetime, BeforeValidator(_ensure_utc)]
"""Timezone-aware datetime, normalised to UTC on input."""
