"""Position ledger: the ordered, uniquely-keyed track sequence of one collection.

Positions are a sort key, not an array index. Appends take ``last + 1`` and
never touch other rows; interior inserts and reorders run a renumbering pass
that assigns ``0..n-1`` in the new order and rewrites every entry. Healing
duplicate positions at load writes only the entries that moved.

The ledger never talks to the track store. Every mutation returns the writes
the caller must persist and optimistically assumes they will succeed; after a
failed batch the caller reloads with :meth:`PositionLedger.load`.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime

from collection_player.domain.collection.entities import OrderedSequence, OrderingChange, TrackRef
from collection_player.domain.collection.value_objects import PositionWrite
from collection_player.domain.shared.exceptions import (
    BusinessRuleViolationError,
    MalformedOrderingError,
    TrackRefNotFoundError,
)
from collection_player.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=UTC)


def _sort_key(ref: TrackRef) -> tuple[int, bool, datetime, str]:
    # Oldest first on equal positions; refs without a timestamp sort last.
    return (ref.position, ref.created_at is None, ref.created_at or _EPOCH, ref.id)


def _renumber(
    entries: list[TrackRef], *, changed_only: bool = False
) -> tuple[OrderedSequence, list[PositionWrite]]:
    """Assign contiguous positions in list order.

    Every entry gets a write unless ``changed_only``, which skips entries
    already at their index.
    """
    renumbered: list[TrackRef] = []
    writes: list[PositionWrite] = []
    for index, ref in enumerate(entries):
        if ref.position != index:
            ref = ref.with_position(index)
        elif changed_only:
            renumbered.append(ref)
            continue
        writes.append(PositionWrite(ref.id, index))
        renumbered.append(ref)
    return tuple(renumbered), writes


class PositionLedger:
    """Owns the ordering of one collection for one editing session."""

    def __init__(self, collection_id: str | None = None, *, strict: bool = False) -> None:
        self._collection_id = collection_id
        self._strict = strict
        self._sequence: OrderedSequence = ()
        self._corrective_writes: tuple[PositionWrite, ...] = ()

    @property
    def collection_id(self) -> str | None:
        return self._collection_id

    @property
    def corrective_writes(self) -> tuple[PositionWrite, ...]:
        """Writes produced by the last load when it had to heal duplicate positions."""
        return self._corrective_writes

    def __len__(self) -> int:
        return len(self._sequence)

    def __contains__(self, track_ref_id: object) -> bool:
        return any(ref.id == track_ref_id for ref in self._sequence)

    def snapshot(self) -> OrderedSequence:
        """Return the current ordering. The tuple is immutable, so no copy is made."""
        return self._sequence

    def get(self, track_ref_id: str) -> TrackRef:
        return self._sequence[self.index_of(track_ref_id)]

    def index_of(self, track_ref_id: str) -> int:
        for index, ref in enumerate(self._sequence):
            if ref.id == track_ref_id:
                return index
        raise TrackRefNotFoundError(track_ref_id)

    def next_position(self) -> int:
        """Position an appended entry would receive."""
        if not self._sequence:
            return 1
        return self._sequence[-1].position + 1

    def load(self, tracks: Iterable[TrackRef], *, strict: bool | None = None) -> OrderedSequence:
        """Replace the ordering with ``tracks`` sorted by position.

        Duplicate ids are always rejected. Duplicate positions are healed by a
        renumbering pass (see :attr:`corrective_writes`) unless ``strict``.
        """
        strict = self._strict if strict is None else strict
        refs = list(tracks)

        id_counts = Counter(ref.id for ref in refs)
        duplicate_ids = tuple(sorted(i for i, count in id_counts.items() if count > 1))
        if duplicate_ids:
            raise MalformedOrderingError(
                ErrorMessages.DUPLICATE_TRACK_REF_IDS.format(ids=", ".join(duplicate_ids)),
                duplicates=duplicate_ids,
            )

        if self._collection_id is not None:
            for ref in refs:
                if ref.collection_id is not None and ref.collection_id != self._collection_id:
                    raise MalformedOrderingError(
                        ErrorMessages.FOREIGN_TRACK_REF.format(
                            track_ref_id=ref.id, other=ref.collection_id
                        )
                    )

        ordered = sorted(refs, key=_sort_key)
        position_counts = Counter(ref.position for ref in ordered)
        duplicate_positions = sorted(p for p, count in position_counts.items() if count > 1)

        writes: list[PositionWrite] = []
        if duplicate_positions:
            if strict:
                raise MalformedOrderingError(
                    ErrorMessages.DUPLICATE_POSITIONS.format(
                        positions=", ".join(str(p) for p in duplicate_positions)
                    ),
                    duplicates=tuple(str(p) for p in duplicate_positions),
                )
            sequence, writes = _renumber(ordered, changed_only=True)
            logger.warning(LogTemplates.LEDGER_HEALED, len(duplicate_positions), len(writes))
        else:
            sequence = tuple(ordered)

        self._sequence = sequence
        self._corrective_writes = tuple(writes)
        logger.debug(LogTemplates.LEDGER_LOADED, len(sequence))
        return self._sequence

    def insert(self, ref: TrackRef, at_index: int) -> OrderingChange:
        """Insert ``ref`` before ``at_index`` (clamped to ``[0, n]``).

        An append writes only the inserted entry; any other index rewrites the
        whole ordering.
        """
        if ref.id in self:
            raise BusinessRuleViolationError(
                rule="DUPLICATE_TRACK_REF",
                message=ErrorMessages.TRACK_REF_ALREADY_PRESENT.format(track_ref_id=ref.id),
            )

        length = len(self._sequence)
        index = max(0, min(at_index, length))

        if index == length:
            position = self.next_position()
            appended = ref.with_position(position)
            sequence = self._sequence + (appended,)
            writes = [PositionWrite(ref.id, position)]
        else:
            entries = list(self._sequence)
            entries.insert(index, ref)
            sequence, writes = _renumber(entries)

        self._sequence = sequence
        logger.debug(LogTemplates.LEDGER_INSERTED, ref.id, index, len(writes))
        return OrderingChange(sequence, tuple(writes))

    def remove(self, track_ref_id: str) -> OrderingChange:
        """Drop an entry. Remaining positions are left as they are."""
        index = self.index_of(track_ref_id)
        sequence = self._sequence[:index] + self._sequence[index + 1 :]
        self._sequence = sequence
        logger.debug(LogTemplates.LEDGER_REMOVED, track_ref_id, index)
        return OrderingChange(sequence, ())

    def reorder(self, track_ref_id: str, to_index: int) -> OrderingChange:
        """Move an entry to ``to_index`` (clamped to ``[0, n-1]``) and renumber."""
        from_index = self.index_of(track_ref_id)
        index = max(0, min(to_index, len(self._sequence) - 1))

        entries = list(self._sequence)
        moved = entries.pop(from_index)
        entries.insert(index, moved)
        sequence, writes = _renumber(entries)

        self._sequence = sequence
        logger.debug(LogTemplates.LEDGER_REORDERED, track_ref_id, from_index, index, len(writes))
        return OrderingChange(sequence, tuple(writes))
