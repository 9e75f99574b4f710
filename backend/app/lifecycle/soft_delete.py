"""Soft-delete with a cancelable undo window.

Per-item state machine:

    Visible -> ConfirmPending -> DeletionPending -> Removed
    ConfirmPending -> Visible   (dismiss before confirming)
    DeletionPending -> Visible  (undo before the timer fires)

Removed is terminal and is read from the owner: an item that is no longer
present is removed. Each pending item owns exactly one timer handle; the
handle is dropped from the working set before the removal callback runs, so
a cancel that arrives after expiry finds nothing and is a no-op.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Protocol

from backend.app.errors import StateError
from backend.app.models.common import now_ms
from backend.app.models.review import PendingDeletion
from backend.app.utils.metrics import record_lifecycle_event

logger = logging.getLogger(__name__)

UNDO_WINDOW_MS = 10_000


class TimerHandle(Protocol):
    """Cancelable timer, e.g. asyncio.TimerHandle."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run a callback later, e.g. an asyncio event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class ItemState(str, Enum):
    """Deletion state of a single input or file."""

    visible = "visible"
    confirm_pending = "confirm_pending"
    deletion_pending = "deletion_pending"
    removed = "removed"


@dataclass
class _ArmedTimer:
    pending: PendingDeletion
    handle: TimerHandle


class SoftDeleteManager:
    """Schedules deferred removal of items with an undo affordance.

    The owner supplies the real removal callbacks and must call cancel_all()
    when the owning view is discarded.
    """

    def __init__(
        self,
        *,
        remove_input: Callable[[str], None],
        remove_file: Callable[[str], None],
        exists: Callable[[str], bool],
        undo_window_ms: int = UNDO_WINDOW_MS,
        scheduler: Scheduler | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        """Initialize manager.

        Args:
            remove_input: Called once with the item id when an input's window expires
            remove_file: Called once with the item id when a file's window expires
            exists: Whether the item is still present; absent items count as removed
            undo_window_ms: Grace window before removal fires
            scheduler: Timer source; defaults to the running asyncio loop
            clock: Epoch-millisecond clock used for expires_at
        """
        self._remove_input = remove_input
        self._remove_file = remove_file
        self._exists = exists
        self._undo_window_ms = undo_window_ms
        self._scheduler = scheduler
        self._clock = clock
        self._timers: dict[str, _ArmedTimer] = {}
        self._confirming: str | None = None

    @property
    def confirming(self) -> str | None:
        """Item currently awaiting delete confirmation, if any."""
        return self._confirming

    @property
    def pending(self) -> list[PendingDeletion]:
        """Snapshot of pending deletions, soonest first."""
        return sorted((t.pending for t in self._timers.values()), key=lambda p: p.expires_at)

    def state_of(self, item_id: str) -> ItemState:
        """Current deletion state of an item."""
        if item_id in self._timers:
            return ItemState.deletion_pending
        if not self._exists(item_id):
            return ItemState.removed
        if item_id == self._confirming:
            return ItemState.confirm_pending
        return ItemState.visible

    def request_confirm(self, item_id: str) -> None:
        """Visible -> ConfirmPending. Replaces any other item awaiting confirmation."""
        state = self.state_of(item_id)
        if state in (ItemState.deletion_pending, ItemState.removed):
            raise StateError(f"Item {item_id} is already {state.value}")
        self._confirming = item_id

    def dismiss_confirm(self, item_id: str) -> bool:
        """ConfirmPending -> Visible. A no-op unless item_id is the one awaiting confirmation."""
        if self._confirming != item_id:
            return False
        self._confirming = None
        return True

    def request_delete(self, item_id: str, is_file: bool) -> PendingDeletion:
        """Arm the undo window for an item.

        A second request for an item that is already pending is a no-op and
        returns the existing entry; no second timer is armed.

        Raises:
            StateError: If the item was already removed
        """
        if not self._exists(item_id):
            raise StateError(f"Item {item_id} was already removed")

        if self._confirming == item_id:
            self._confirming = None

        armed = self._timers.get(item_id)
        if armed is not None:
            logger.debug(f"Deletion already pending for {item_id}, ignoring repeat request")
            return armed.pending

        pending = PendingDeletion(
            item_id=item_id,
            is_file=is_file,
            expires_at=self._clock() + self._undo_window_ms,
        )
        handle = self._get_scheduler().call_later(
            self._undo_window_ms / 1000, partial(self._expire, item_id, pending)
        )
        self._timers[item_id] = _ArmedTimer(pending=pending, handle=handle)
        record_lifecycle_event("deletion_requested")
        return pending

    def cancel(self, item_id: str) -> bool:
        """Undo a pending deletion.

        Returns:
            True if a pending deletion was canceled, False if there was none
            (never pending, already expired, or already canceled)
        """
        armed = self._timers.pop(item_id, None)
        if armed is None:
            return False
        armed.handle.cancel()
        record_lifecycle_event("deletion_undone")
        return True

    def cancel_all(self) -> int:
        """Cancel every outstanding timer. Returns how many were canceled."""
        armed = list(self._timers.values())
        self._timers.clear()
        self._confirming = None
        for timer in armed:
            timer.handle.cancel()
        return len(armed)

    def _expire(self, item_id: str, pending: PendingDeletion) -> None:
        armed = self._timers.get(item_id)
        # Canceled, or superseded by a later request for the same id
        if armed is None or armed.pending is not pending:
            return

        del self._timers[item_id]
        record_lifecycle_event("deletion_fired")

        if pending.is_file:
            self._remove_file(item_id)
        else:
            self._remove_input(item_id)

    def _get_scheduler(self) -> Scheduler:
        if self._scheduler is None:
            self._scheduler = asyncio.get_running_loop()
        return self._scheduler
