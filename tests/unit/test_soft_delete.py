"""Tests for the soft-delete manager and its undo window."""

import asyncio

import pytest

from backend.app.errors import StateError
from backend.app.lifecycle.soft_delete import UNDO_WINDOW_MS, ItemState, SoftDeleteManager


class Removals:
    """Records removal callbacks."""

    def __init__(self) -> None:
        self.inputs: list[str] = []
        self.files: list[str] = []

    def exists(self, item_id: str) -> bool:
        return item_id not in self.inputs and item_id not in self.files


@pytest.fixture
def removals() -> Removals:
    return Removals()


@pytest.fixture
def manager(scheduler, removals: Removals) -> SoftDeleteManager:
    return SoftDeleteManager(
        remove_input=removals.inputs.append,
        remove_file=removals.files.append,
        exists=removals.exists,
        scheduler=scheduler,
        clock=scheduler.clock,
    )


def test_request_delete_arms_window(manager: SoftDeleteManager, scheduler) -> None:
    """Test pending entry expires exactly one undo window after the request."""
    pending = manager.request_delete("a", is_file=False)

    assert pending.item_id == "a"
    assert pending.is_file is False
    assert pending.expires_at == scheduler.now + UNDO_WINDOW_MS
    assert manager.state_of("a") == ItemState.deletion_pending
    assert manager.pending == [pending]


def test_removal_fires_once_after_window(
    manager: SoftDeleteManager, scheduler, removals: Removals
) -> None:
    """Test removal fires exactly once when the window elapses."""
    manager.request_delete("a", is_file=False)

    scheduler.advance(UNDO_WINDOW_MS - 1)
    assert removals.inputs == []

    scheduler.advance(1)
    assert removals.inputs == ["a"]
    assert manager.state_of("a") == ItemState.removed
    assert manager.pending == []

    scheduler.advance(UNDO_WINDOW_MS * 3)
    assert removals.inputs == ["a"]


def test_file_removal_uses_file_callback(
    manager: SoftDeleteManager, scheduler, removals: Removals
) -> None:
    """Test file deletions route to the file callback."""
    manager.request_delete("f", is_file=True)
    scheduler.advance(UNDO_WINDOW_MS)

    assert removals.files == ["f"]
    assert removals.inputs == []


def test_cancel_within_window_prevents_removal(
    manager: SoftDeleteManager, scheduler, removals: Removals
) -> None:
    """Test undo inside the window leaves the item visible and never fires."""
    manager.request_delete("a", is_file=False)
    scheduler.advance(UNDO_WINDOW_MS // 2)

    assert manager.cancel("a") is True
    assert manager.state_of("a") == ItemState.visible
    assert manager.pending == []

    scheduler.advance(UNDO_WINDOW_MS * 2)
    assert removals.inputs == []


def test_cancel_after_expiry_is_noop(
    manager: SoftDeleteManager, scheduler, removals: Removals
) -> None:
    """Test cancel after the timer fired reports False and changes nothing."""
    manager.request_delete("a", is_file=False)
    scheduler.advance(UNDO_WINDOW_MS)

    assert manager.cancel("a") is False
    assert manager.state_of("a") == ItemState.removed
    assert removals.inputs == ["a"]


def test_cancel_unknown_item_is_noop(manager: SoftDeleteManager) -> None:
    assert manager.cancel("never-requested") is False


def test_repeat_request_does_not_double_fire(
    manager: SoftDeleteManager, scheduler, removals: Removals
) -> None:
    """Test a second request for a pending item keeps the first timer only."""
    first = manager.request_delete("a", is_file=False)
    scheduler.advance(3_000)
    second = manager.request_delete("a", is_file=False)

    assert second == first
    assert scheduler.armed == 1

    scheduler.advance(UNDO_WINDOW_MS)
    assert removals.inputs == ["a"]


def test_request_delete_after_removal_raises(manager: SoftDeleteManager, scheduler) -> None:
    """Test removed is terminal."""
    manager.request_delete("a", is_file=False)
    scheduler.advance(UNDO_WINDOW_MS)

    with pytest.raises(StateError):
        manager.request_delete("a", is_file=False)


def test_request_delete_after_undo_rearms(
    manager: SoftDeleteManager, scheduler, removals: Removals
) -> None:
    """Test an undone item can be deleted again with a fresh window."""
    manager.request_delete("a", is_file=False)
    scheduler.advance(4_000)
    manager.cancel("a")

    again = manager.request_delete("a", is_file=False)
    assert again.expires_at == scheduler.now + UNDO_WINDOW_MS

    scheduler.advance(UNDO_WINDOW_MS - 1)
    assert removals.inputs == []
    scheduler.advance(1)
    assert removals.inputs == ["a"]


def test_independent_items_have_independent_timers(
    manager: SoftDeleteManager, scheduler, removals: Removals
) -> None:
    """Test undoing one item does not affect another."""
    manager.request_delete("a", is_file=False)
    scheduler.advance(1_000)
    manager.request_delete("b", is_file=False)

    assert [p.item_id for p in manager.pending] == ["a", "b"]

    manager.cancel("a")
    scheduler.advance(UNDO_WINDOW_MS)

    assert removals.inputs == ["b"]


def test_confirm_flow(manager: SoftDeleteManager) -> None:
    """Test Visible -> ConfirmPending -> Visible and single confirm slot."""
    manager.request_confirm("a")
    assert manager.confirming == "a"
    assert manager.state_of("a") == ItemState.confirm_pending

    manager.request_confirm("b")
    assert manager.confirming == "b"
    assert manager.state_of("a") == ItemState.visible

    assert manager.dismiss_confirm("a") is False
    assert manager.confirming == "b"

    assert manager.dismiss_confirm("b") is True
    assert manager.confirming is None


def test_removed_state_follows_item_presence(scheduler) -> None:
    """Test an item the owner no longer holds reads as removed without any recorded history."""
    present = {"a"}
    manager = SoftDeleteManager(
        remove_input=present.discard,
        remove_file=present.discard,
        exists=present.__contains__,
        scheduler=scheduler,
        clock=scheduler.clock,
    )

    assert manager.state_of("a") == ItemState.visible
    assert manager.state_of("gone") == ItemState.removed
    with pytest.raises(StateError):
        manager.request_confirm("gone")

    manager.request_delete("a", is_file=False)
    scheduler.advance(UNDO_WINDOW_MS)

    assert present == set()
    assert manager.state_of("a") == ItemState.removed
    assert manager.pending == []


def test_request_delete_clears_confirm(manager: SoftDeleteManager) -> None:
    manager.request_confirm("a")
    manager.request_delete("a", is_file=False)

    assert manager.confirming is None
    assert manager.state_of("a") == ItemState.deletion_pending


def test_request_confirm_on_pending_item_raises(manager: SoftDeleteManager) -> None:
    manager.request_delete("a", is_file=False)

    with pytest.raises(StateError):
        manager.request_confirm("a")


def test_cancel_all_cancels_every_timer(
    manager: SoftDeleteManager, scheduler, removals: Removals
) -> None:
    """Test teardown cancels outstanding timers so nothing fires later."""
    manager.request_delete("a", is_file=False)
    manager.request_delete("f", is_file=True)
    manager.request_confirm("c")

    assert manager.cancel_all() == 2
    assert manager.pending == []
    assert manager.confirming is None

    scheduler.advance(UNDO_WINDOW_MS * 2)
    assert removals.inputs == []
    assert removals.files == []


@pytest.mark.asyncio
async def test_defaults_to_running_event_loop(removals: Removals) -> None:
    """Test the asyncio loop is used as scheduler when none is injected."""
    manager = SoftDeleteManager(
        remove_input=removals.inputs.append,
        remove_file=removals.files.append,
        exists=removals.exists,
        undo_window_ms=10,
    )

    manager.request_delete("a", is_file=False)
    await asyncio.sleep(0.05)

    assert removals.inputs == ["a"]
