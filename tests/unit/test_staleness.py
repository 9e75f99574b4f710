"""Tests for the staleness tracker."""

from backend.app.lifecycle.staleness import StalenessTracker


def test_starts_not_stale() -> None:
    assert StalenessTracker().stale is False


def test_removing_item_older_than_analysis_marks_stale() -> None:
    tracker = StalenessTracker()

    assert tracker.on_item_removed(item_timestamp=100, last_analysis_update=200) is True
    assert tracker.stale is True


def test_removing_item_newer_than_analysis_does_not_mark_stale() -> None:
    tracker = StalenessTracker()

    assert tracker.on_item_removed(item_timestamp=300, last_analysis_update=200) is False


def test_equal_timestamps_do_not_mark_stale() -> None:
    """Test the comparison is strict: an item created at the analysis instant was not seen."""
    tracker = StalenessTracker()

    assert tracker.on_item_removed(item_timestamp=200, last_analysis_update=200) is False


def test_no_analysis_never_stale() -> None:
    tracker = StalenessTracker()

    assert tracker.on_item_removed(item_timestamp=1, last_analysis_update=None) is False


def test_stale_is_sticky_until_analysis_completes() -> None:
    """Test a later harmless removal does not clear the flag."""
    tracker = StalenessTracker()
    tracker.on_item_removed(item_timestamp=100, last_analysis_update=200)

    assert tracker.on_item_removed(item_timestamp=300, last_analysis_update=200) is True

    tracker.on_analysis_completed()
    assert tracker.stale is False
