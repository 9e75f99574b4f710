"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable
from itertools import count

import pytest

from backend.app.lifecycle.aggregate import DecisionSession
from backend.app.llm.client import DeterministicStubClient, LLMClient
from backend.app.models.common import InputType
from backend.app.models.decision import Decision, FileItem, InputItem

START_MS = 1_700_000_000_000

_ids = count(1)


class ManualTimer:
    """Timer handle armed on a ManualScheduler."""

    def __init__(self, due: int, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-time scheduler and clock.

    call_later() arms a timer against virtual time; advance(ms) moves the
    clock forward and fires every timer that falls due, in due order.
    """

    def __init__(self, start_ms: int = START_MS) -> None:
        self.now = start_ms
        self.timers: list[ManualTimer] = []

    def clock(self) -> int:
        return self.now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now + round(delay * 1000), callback)
        self.timers.append(timer)
        return timer

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while True:
            due = [t for t in self.timers if not t.cancelled and t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.timers.remove(timer)
            self.now = max(self.now, timer.due)
            timer.callback()
        self.now = target

    @property
    def armed(self) -> int:
        return sum(1 for t in self.timers if not t.cancelled)


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual clock + timer source starting at a fixed instant."""
    return ManualScheduler()


@pytest.fixture
def stub_llm() -> DeterministicStubClient:
    return DeterministicStubClient()


def _make_input(
    content: str = "Churn rose 4% after the pricing change",
    *,
    timestamp: int = START_MS,
    input_type: InputType = InputType.evidence,
    item_id: str | None = None,
) -> InputItem:
    """Build an InputItem with sensible defaults."""
    return InputItem(
        id=item_id or f"in-{next(_ids)}",
        type=input_type,
        content=content,
        author="Product Lead",
        timestamp=timestamp,
    )


def _make_file(file_name: str = "research.txt", *, timestamp: int = START_MS, item_id: str = "file-1") -> FileItem:
    return FileItem(
        id=item_id,
        file_name=file_name,
        file_type=file_name.rsplit(".", 1)[-1],
        file_text="Interview notes.",
        timestamp=timestamp,
    )


def _make_decision(**overrides: object) -> Decision:
    """Build an active Decision; keyword overrides replace any field."""
    fields: dict[str, object] = {
        "id": "dec-1",
        "title": "Should we deprecate the legacy API in Q3?",
        "context": "Enterprise customers still depend on v1.",
        "owner": "Dana",
        "deadline": "2025-09-30",
        "created_at": START_MS - 60_000,
    }
    fields.update(overrides)
    return Decision.model_validate(fields)


class SessionHarness:
    """A DecisionSession wired to a ManualScheduler, recording every commit."""

    def __init__(self, decision: Decision, llm: LLMClient, scheduler: ManualScheduler) -> None:
        self.commits: list[Decision] = []
        self.scheduler = scheduler
        self.session = DecisionSession(
            decision,
            commit=self.commits.append,
            llm=llm,
            scheduler=scheduler,
            clock=scheduler.clock,
        )


@pytest.fixture
def make_harness(
    stub_llm: DeterministicStubClient, scheduler: ManualScheduler
) -> Callable[..., SessionHarness]:
    """Factory: make_harness(decision=None, llm=None) -> SessionHarness."""

    def _make(decision: Decision | None = None, llm: LLMClient | None = None) -> SessionHarness:
        return SessionHarness(decision or _make_decision(), llm or stub_llm, scheduler)

    return _make


@pytest.fixture
def make_decision() -> Callable[..., Decision]:
    return _make_decision


@pytest.fixture
def make_input() -> Callable[..., InputItem]:
    return _make_input


@pytest.fixture
def make_file() -> Callable[..., FileItem]:
    return _make_file
