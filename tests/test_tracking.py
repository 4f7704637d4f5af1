"""Tests for change tracking."""

from gtfs_filter.filter.tracking import SizeChange, TrackedSet, format_count


def test_format_count_verbatim() -> None:
    """Test small numbers are shown as is, with thousands grouping."""
    assert format_count(0) == "0"
    assert format_count(42) == "42"
    assert format_count(99_999) == "99,999"


def test_format_count_thousands() -> None:
    """Test numbers from 100,000 are shown in thousands."""
    assert format_count(100_000) == "100'"
    assert format_count(2_345_678) == "2,345'"
    assert format_count(99_999_999) == "99,999'"


def test_format_count_millions() -> None:
    """Test numbers from 100,000,000 are shown in millions."""
    assert format_count(100_000_000) == '100"'
    assert format_count(1_234_567_890) == '1,234"'


def test_checkpoint_no_change() -> None:
    """Test an unchanged set reports nothing."""
    tracked = TrackedSet("stops", [1, 2, 3])
    tracked.reset_change_tracking()

    assert tracked.checkpoint() is None


def test_checkpoint_reports_and_resets() -> None:
    """Test a shrink is reported once and the checkpoint moves forward."""
    tracked = TrackedSet("stops", [1, 2, 3, 4])
    tracked.reset_change_tracking()
    tracked.discard(1)
    tracked.discard(2)

    change = tracked.checkpoint()
    assert change == SizeChange("stops", 4, 2)
    assert change.removed == 2
    assert tracked.checkpoint() is None


def test_checkpoint_before_reset_counts_from_zero() -> None:
    """Test a fresh set compares against an empty checkpoint."""
    tracked = TrackedSet("trips", ["a"])

    assert tracked.checkpoint() == SizeChange("trips", 0, 1)


def test_remove_if() -> None:
    """Test predicate removal returns the number removed."""
    tracked = TrackedSet("numbers", range(10))

    removed = tracked.remove_if(lambda n: n % 2 == 0)

    assert removed == 5
    assert tracked == {1, 3, 5, 7, 9}


def test_size_change_str() -> None:
    """Test log line layout."""
    change = SizeChange("stopTimes", 250_000, 1_000)

    assert str(change) == "  - stopTimes     : 249' of 250' => 1,000"
