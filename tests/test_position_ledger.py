"""
Unit Tests for the Position Ledger

Tests for:
- Loading, sorting, and healing duplicate positions
- Append vs. interior insert write sets
- Gap-tolerant removal
- Reorder with renumbering and clamping
- Ordering invariants under random edit sequences
"""

import random

import pytest

from collection_player.domain.collection.entities import TrackRef
from collection_player.domain.collection.ledger import PositionLedger
from collection_player.domain.collection.value_objects import PositionWrite
from collection_player.domain.shared.exceptions import (
    BusinessRuleViolationError,
    MalformedOrderingError,
    TrackRefNotFoundError,
)


def _ids(sequence) -> list[str]:
    return [ref.id for ref in sequence]


def _positions(sequence) -> list[int]:
    return [ref.position for ref in sequence]


@pytest.fixture
def ledger(abc_ordering):
    ledger = PositionLedger("col-1")
    ledger.load(abc_ordering)
    return ledger


# =============================================================================
# Load
# =============================================================================


class TestLedgerLoad:
    """Unit tests for PositionLedger.load."""

    def test_sorts_by_position(self, make_ref):
        """Should order refs ascending by position regardless of input order."""
        ledger = PositionLedger()
        sequence = ledger.load([make_ref("c", 7), make_ref("a", 0), make_ref("b", 3)])

        assert _ids(sequence) == ["a", "b", "c"]
        assert _positions(sequence) == [0, 3, 7]
        assert ledger.corrective_writes == ()

    def test_load_empty(self):
        """Should accept an empty listing."""
        ledger = PositionLedger()
        assert ledger.load([]) == ()
        assert len(ledger) == 0

    def test_duplicate_ids_rejected(self, make_ref):
        """Should raise MalformedOrderingError for repeated track ref ids."""
        ledger = PositionLedger()
        with pytest.raises(MalformedOrderingError) as exc_info:
            ledger.load([make_ref("a", 0), make_ref("a", 1)])

        assert exc_info.value.duplicates == ("a",)
        assert exc_info.value.code == "MALFORMED_ORDERING"

    def test_duplicate_positions_healed_oldest_first(self, make_ref):
        """Should tie-break equal positions by creation time and renumber."""
        ledger = PositionLedger()
        sequence = ledger.load(
            [
                make_ref("a", 0, age=0),
                make_ref("b", 1, age=20),
                make_ref("c", 1, age=10),
                make_ref("d", 3, age=5),
            ]
        )

        assert _ids(sequence) == ["a", "c", "b", "d"]
        assert _positions(sequence) == [0, 1, 2, 3]
        assert ledger.corrective_writes == (PositionWrite("b", 2),)

    def test_duplicate_positions_without_timestamps_sort_last(self, make_ref):
        """Should place refs lacking a timestamp after timestamped ones."""
        ledger = PositionLedger()
        sequence = ledger.load([make_ref("x", 0), make_ref("y", 0, age=1)])

        assert _ids(sequence) == ["y", "x"]
        assert ledger.corrective_writes == (PositionWrite("x", 1),)

    def test_duplicate_positions_strict_raises(self, make_ref):
        """Should raise instead of healing when strict."""
        ledger = PositionLedger(strict=True)
        with pytest.raises(MalformedOrderingError):
            ledger.load([make_ref("a", 2), make_ref("b", 2)])

    def test_strict_override_per_call(self, make_ref):
        """Should honour a per-call strict flag over the constructor default."""
        ledger = PositionLedger()
        with pytest.raises(MalformedOrderingError):
            ledger.load([make_ref("a", 2), make_ref("b", 2)], strict=True)

    def test_failed_load_keeps_previous_ordering(self, ledger, make_ref):
        """Should leave the existing ordering intact when load is rejected."""
        before = ledger.snapshot()
        with pytest.raises(MalformedOrderingError):
            ledger.load([make_ref("a", 0), make_ref("a", 1)])

        assert ledger.snapshot() is before

    def test_foreign_collection_rejected(self, make_ref):
        """Should reject refs that belong to another collection."""
        ledger = PositionLedger("col-1")
        with pytest.raises(MalformedOrderingError):
            ledger.load([make_ref("a", 0, collection_id="col-2")])

    def test_corrective_writes_cleared_on_clean_reload(self, make_ref):
        """Should reset corrective writes when the next load is clean."""
        ledger = PositionLedger()
        ledger.load([make_ref("a", 0), make_ref("b", 0)])
        assert ledger.corrective_writes

        ledger.load([make_ref("a", 0), make_ref("b", 1)])
        assert ledger.corrective_writes == ()


# =============================================================================
# Insert
# =============================================================================


class TestLedgerInsert:
    """Unit tests for PositionLedger.insert."""

    def test_append_into_empty_starts_at_one(self, make_ref):
        """Should assign position 1 to the first appended entry."""
        ledger = PositionLedger()
        sequence, writes = ledger.insert(make_ref("a", 0), 0)

        assert _positions(sequence) == [1]
        assert writes == (PositionWrite("a", 1),)

    def test_append_uses_last_position_plus_one(self, ledger, make_ref):
        """Should append after the last position with a single write."""
        change = ledger.insert(make_ref("x", 0), 3)

        assert _ids(change.sequence) == ["A", "B", "C", "x"]
        assert change.sequence[-1].position == 3
        assert change.writes == (PositionWrite("x", 3),)

    def test_append_after_gap(self, make_ref):
        """Should append after the highest position even with gaps."""
        ledger = PositionLedger()
        ledger.load([make_ref("a", 0), make_ref("b", 10)])

        change = ledger.insert(make_ref("x", 0), 2)

        assert change.sequence[-1].position == 11
        assert len(change.writes) == 1

    def test_appending_many_never_renumbers(self, make_ref):
        """Should emit exactly one write per append."""
        ledger = PositionLedger()
        for n in range(25):
            change = ledger.insert(make_ref(f"t{n}", 0), len(ledger))
            assert len(change.writes) == 1

        positions = _positions(ledger.snapshot())
        assert positions == sorted(set(positions))

    def test_insert_at_start_rewrites_everything(self, ledger, make_ref):
        """Should write all N+1 entries when inserting at index 0."""
        change = ledger.insert(make_ref("x", 99), 0)

        assert _ids(change.sequence) == ["x", "A", "B", "C"]
        assert _positions(change.sequence) == [0, 1, 2, 3]
        assert len(change.writes) == 4
        assert change.writes[0] == PositionWrite("x", 0)

    def test_insert_at_start_after_appends_rewrites_everything(self, make_ref):
        """Appended positions start at 1, so inserting at 0 must still rewrite all."""
        ledger = PositionLedger()
        for n in range(3):
            ledger.insert(make_ref(f"t{n}", 0), len(ledger))
        assert _positions(ledger.snapshot()) == [1, 2, 3]

        change = ledger.insert(make_ref("x", 0), 0)

        assert _positions(change.sequence) == [0, 1, 2, 3]
        assert change.writes == (
            PositionWrite("x", 0),
            PositionWrite("t0", 1),
            PositionWrite("t1", 2),
            PositionWrite("t2", 3),
        )

    def test_insert_in_middle_rewrites_everything(self, ledger, make_ref):
        """Should write every entry on an interior insert, unchanged ones included."""
        change = ledger.insert(make_ref("x", 50), 1)

        assert _ids(change.sequence) == ["A", "x", "B", "C"]
        assert change.writes == (
            PositionWrite("A", 0),
            PositionWrite("x", 1),
            PositionWrite("B", 2),
            PositionWrite("C", 3),
        )

    def test_insert_into_gap_renumbers(self, make_ref):
        """Should close gaps while inserting."""
        ledger = PositionLedger()
        ledger.load([make_ref("a", 0), make_ref("c", 7)])

        change = ledger.insert(make_ref("b", 9), 1)

        assert _positions(change.sequence) == [0, 1, 2]
        assert len(change.writes) == 3

    def test_insert_index_clamped(self, ledger, make_ref):
        """Should clamp out-of-range insert indices."""
        change = ledger.insert(make_ref("x", 0), 99)
        assert change.sequence[-1].id == "x"

        change = ledger.insert(make_ref("y", 0), -4)
        assert change.sequence[0].id == "y"

    def test_insert_existing_id_rejected(self, ledger, make_ref):
        """Should reject a ref already present and keep state."""
        before = ledger.snapshot()
        with pytest.raises(BusinessRuleViolationError):
            ledger.insert(make_ref("B", 0), 0)

        assert ledger.snapshot() is before

    def test_updated_sequence_alias(self, ledger, make_ref):
        """Should expose the new ordering under updated_sequence too."""
        change = ledger.insert(make_ref("x", 0), 0)
        assert change.updated_sequence is change.sequence
        assert ledger.snapshot() is change.sequence


# =============================================================================
# Remove
# =============================================================================


class TestLedgerRemove:
    """Unit tests for PositionLedger.remove."""

    def test_remove_leaves_gap(self, ledger):
        """Should drop the entry without renumbering the rest."""
        sequence, writes = ledger.remove("B")

        assert _ids(sequence) == ["A", "C"]
        assert _positions(sequence) == [0, 2]
        assert writes == ()

    def test_remove_unknown_raises(self, ledger):
        """Should raise TrackRefNotFoundError and keep state."""
        before = ledger.snapshot()
        with pytest.raises(TrackRefNotFoundError) as exc_info:
            ledger.remove("nope")

        assert exc_info.value.track_ref_id == "nope"
        assert ledger.snapshot() is before

    def test_remove_last_entry(self, ledger):
        """Should allow emptying the ordering."""
        for ref_id in ("A", "B", "C"):
            ledger.remove(ref_id)

        assert ledger.snapshot() == ()
        assert ledger.next_position() == 1


# =============================================================================
# Reorder
# =============================================================================


class TestLedgerReorder:
    """Unit tests for PositionLedger.reorder."""

    def test_move_to_front(self, ledger):
        """Should move an entry to index 0 and renumber."""
        sequence, writes = ledger.reorder("C", 0)

        assert _ids(sequence) == ["C", "A", "B"]
        assert _positions(sequence) == [0, 1, 2]
        assert len(writes) == 3

    def test_move_writes_every_entry(self, make_ref):
        """Should write all entries, including those that keep their position."""
        ledger = PositionLedger()
        ledger.load([make_ref(x, i) for i, x in enumerate("abcd")])

        change = ledger.reorder("d", 1)

        assert _ids(change.sequence) == ["a", "d", "b", "c"]
        assert change.writes == (
            PositionWrite("a", 0),
            PositionWrite("d", 1),
            PositionWrite("b", 2),
            PositionWrite("c", 3),
        )

    def test_move_to_same_index_still_rewrites(self, ledger):
        """Should keep the order and rewrite every entry."""
        change = ledger.reorder("B", 1)

        assert _ids(change.sequence) == ["A", "B", "C"]
        assert len(change.writes) == 3

    def test_reorder_closes_gaps(self, ledger):
        """Should renumber gaps left by removals."""
        ledger.remove("B")
        change = ledger.reorder("C", 0)

        assert _ids(change.sequence) == ["C", "A"]
        assert change.writes == (PositionWrite("C", 0), PositionWrite("A", 1))

    def test_reorder_clamps_index(self, ledger):
        """Should clamp target index to [0, n-1]."""
        assert _ids(ledger.reorder("A", 42).sequence) == ["B", "C", "A"]
        assert _ids(ledger.reorder("A", -3).sequence) == ["A", "B", "C"]

    def test_reorder_unknown_raises(self, ledger):
        """Should raise TrackRefNotFoundError and keep state."""
        before = ledger.snapshot()
        with pytest.raises(TrackRefNotFoundError):
            ledger.reorder("Z", 0)
        assert ledger.snapshot() is before


# =============================================================================
# Queries
# =============================================================================


class TestLedgerQueries:
    """Unit tests for read-only ledger helpers."""

    def test_snapshot_is_same_reference(self, ledger):
        """Should return the stored tuple without copying."""
        assert ledger.snapshot() is ledger.snapshot()
        assert isinstance(ledger.snapshot(), tuple)

    def test_index_and_membership(self, ledger):
        """Should look entries up by id."""
        assert ledger.index_of("C") == 2
        assert ledger.get("B").position == 1
        assert "A" in ledger
        assert "Z" not in ledger


# =============================================================================
# Properties
# =============================================================================


def _apply(store: dict[str, int], writes) -> None:
    for write in writes:
        store[write.track_ref_id] = write.position


def _reload(store: dict[str, int]) -> list[str]:
    refs = [TrackRef(id=i, audio_id=f"audio-{i}", position=p) for i, p in store.items()]
    return _ids(PositionLedger().load(refs))


class TestLedgerProperties:
    """Invariants that hold across arbitrary edit sequences."""

    def test_round_trip_insert_matches_direct_load(self, abc_ordering, make_ref):
        """Applying insert writes and reloading should reproduce the same ordering."""
        ledger = PositionLedger()
        ledger.load(abc_ordering)
        new_ref = make_ref("x", 99)

        change = ledger.insert(new_ref, 1)

        store = {ref.id: ref.position for ref in abc_ordering}
        store["x"] = new_ref.position
        _apply(store, change.writes)

        target = [make_ref(i, p) for p, i in enumerate(["A", "x", "B", "C"])]
        assert _reload(store) == _ids(PositionLedger().load(target))
        assert _reload(store) == _ids(change.sequence)

    @pytest.mark.parametrize("seed", [1, 7, 42, 2024])
    def test_random_edits_keep_strictly_increasing_positions(self, seed):
        """Positions should stay unique and in play order under random edits."""
        rng = random.Random(seed)
        ledger = PositionLedger()
        expected: list[str] = []
        store: dict[str, int] = {}

        for step in range(200):
            op = rng.choice(["insert", "insert", "remove", "reorder"])
            if op == "insert" or not expected:
                ref_id = f"r{step}"
                index = rng.randint(0, len(expected))
                provisional = ledger.next_position()
                change = ledger.insert(
                    TrackRef(id=ref_id, audio_id=ref_id, position=provisional), index
                )
                expected.insert(index, ref_id)
                store[ref_id] = provisional
            elif op == "remove":
                ref_id = rng.choice(expected)
                change = ledger.remove(ref_id)
                expected.remove(ref_id)
                del store[ref_id]
            else:
                ref_id = rng.choice(expected)
                to_index = rng.randint(0, len(expected) - 1)
                change = ledger.reorder(ref_id, to_index)
                expected.remove(ref_id)
                expected.insert(to_index, ref_id)

            _apply(store, change.writes)

            positions = _positions(change.sequence)
            assert all(a < b for a, b in zip(positions, positions[1:]))
            assert _ids(change.sequence) == expected
            assert {ref.id: ref.position for ref in change.sequence} == store
            assert _reload(store) == expected
