"""Tests for the demand-paging model.

Covers construction checks, hit/fault classification, the round-robin
frame cursor (including frame sharing once faults outnumber frames),
range errors, statistics and the page table snapshot.
"""

import pytest

from paging_model import (
    FAULT,
    HIT,
    AccessResult,
    InvalidArgument,
    OutOfRange,
    PagingSimulator,
    access,
    format_result,
    initialize,
)

# -- Construction -------------------------------------------------------------


class TestConstruction:
    """Verify page table setup and argument checks."""

    @pytest.mark.parametrize(
        ("pages", "frames"),
        [(0, 1), (1, 0), (0, 0), (-1, 4), (4, -3), (-5, -5)],
    )
    def test_non_positive_sizes_rejected(self, pages: int, frames: int) -> None:
        """Any non-positive page or frame count should raise InvalidArgument."""
        with pytest.raises(InvalidArgument, match="must be positive"):
            PagingSimulator(pages, frames)

    def test_invalid_argument_is_value_error(self) -> None:
        """InvalidArgument should be catchable as a ValueError."""
        with pytest.raises(ValueError):
            initialize(0, 2)

    def test_all_pages_start_unmapped(self) -> None:
        """A new simulator has one invalid entry per page."""
        sim = initialize(5, 3)
        assert len(sim.page_table) == 5
        assert all(not entry.valid for entry in sim.page_table)
        assert all(entry.frame is None for entry in sim.page_table)
        assert not any(sim.is_mapped(page) for page in range(5))

    def test_cursor_and_counters_start_at_zero(self) -> None:
        sim = initialize(2, 2)
        assert sim.next_frame == 0
        assert sim.total_count == 0
        assert sim.fault_rate == 0.0


# -- Access -------------------------------------------------------------------


class TestAccess:
    """Verify hit/fault classification and table mutation."""

    def test_first_access_faults_then_hits(self) -> None:
        """The first access faults; later ones hit the same frame."""
        sim = initialize(3, 3)
        first = access(sim, 1)
        assert first == AccessResult(FAULT, 1, 0)
        for _ in range(3):
            again = access(sim, 1)
            assert again.status == HIT
            assert again.frame == first.frame

    def test_hit_does_not_move_cursor(self) -> None:
        sim = initialize(2, 2)
        sim.access(0)
        sim.access(0)
        assert sim.next_frame == 1

    def test_fault_maps_entry(self) -> None:
        sim = initialize(2, 2)
        sim.access(1)
        entry = sim.entry(1)
        assert entry.valid
        assert entry.frame == 0

    def test_four_pages_two_frames_scenario(self) -> None:
        """Faults past the frame count reuse frames held by other pages."""
        sim = initialize(4, 2)
        expected = [
            (0, FAULT, 0),
            (1, FAULT, 1),
            (2, FAULT, 0),
            (0, HIT, 0),
            (3, FAULT, 1),
        ]
        for page, status, frame in expected:
            result = sim.access(page)
            assert (result.status, result.frame) == (status, frame)
        assert sim.pages_in_frame(0) == [0, 2]
        assert sim.pages_in_frame(1) == [1, 3]

    def test_single_page_single_frame_scenario(self) -> None:
        sim = initialize(1, 1)
        assert sim.access(0) == AccessResult(FAULT, 0, 0)
        assert sim.access(0) == AccessResult(HIT, 0, 0)
        with pytest.raises(OutOfRange):
            sim.access(1)

    @pytest.mark.parametrize("order", [[0, 1, 2, 3, 4, 5, 6], [6, 2, 5, 0, 3, 1, 4]])
    def test_round_robin_ignores_page_order(self, order: list) -> None:
        """Frames go 0, 1, 2, 0, ... by fault order, whatever pages fault."""
        sim = initialize(7, 3)
        frames = [sim.access(page).frame for page in order]
        assert frames == [0, 1, 2, 0, 1, 2, 0]

    def test_simulators_do_not_share_cursor(self) -> None:
        """Each simulator hands out frames from its own cursor."""
        first = initialize(4, 4)
        second = initialize(4, 4)
        first.access(0)
        first.access(1)
        assert second.access(0).frame == 0


# -- Errors -------------------------------------------------------------------


class TestOutOfRange:
    """Verify range checks leave the simulator untouched."""

    @pytest.mark.parametrize("page", [-1, 3, 4, 100])
    def test_bad_page_raises(self, page: int) -> None:
        sim = initialize(3, 2)
        with pytest.raises(OutOfRange, match="Invalid virtual page number."):
            sim.access(page)

    def test_state_unchanged_after_bad_access(self) -> None:
        sim = initialize(3, 2)
        sim.access(0)
        before = sim.get_snapshot()
        with pytest.raises(IndexError):
            sim.access(-1)
        assert sim.get_snapshot() == before
        assert sim.next_frame == 1
        assert sim.total_count == 1

    def test_valid_access_after_error(self) -> None:
        sim = initialize(3, 2)
        with pytest.raises(OutOfRange):
            sim.access(3)
        assert sim.access(2) == AccessResult(FAULT, 2, 0)

    def test_pages_in_frame_checks_range(self) -> None:
        sim = initialize(3, 2)
        with pytest.raises(OutOfRange):
            sim.pages_in_frame(2)


# -- Messages -----------------------------------------------------------------


class TestFormatResult:
    """Verify the user-facing messages."""

    def test_hit_message_includes_frame(self) -> None:
        result = AccessResult(HIT, 3, 1)
        assert format_result(result) == "Page Hit: Page 3 is in frame 1"

    def test_fault_message_omits_frame(self) -> None:
        result = AccessResult(FAULT, 2, 1)
        assert format_result(result) == (
            "Page Fault: Page 2 not in memory. Fetching from memory..."
        )
        assert result.message == format_result(result)


# -- Statistics and snapshot --------------------------------------------------


class TestStatistics:
    """Verify counters and the per-page snapshot."""

    def test_counts_and_rate(self) -> None:
        sim = initialize(4, 2)
        for page in [0, 1, 0, 0]:
            sim.access(page)
        assert sim.hit_count == 2
        assert sim.fault_count == 2
        assert sim.total_count == 4
        assert sim.fault_rate == pytest.approx(50.0)

    def test_snapshot_flags_shared_frames(self) -> None:
        sim = initialize(4, 2)
        for page in [0, 1, 2]:
            sim.access(page)
        snapshot = sim.get_snapshot()
        assert [row["aliased"] for row in snapshot] == [True, False, True, False]
        assert snapshot[3] == {"page": 3, "frame": None, "valid": False, "aliased": False}
