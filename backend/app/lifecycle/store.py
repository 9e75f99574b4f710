"""Root aggregate owning the decision list and the live per-decision sessions."""

import logging
from collections.abc import Callable

from backend.app.db.repositories import DecisionRepository
from backend.app.errors import NotFoundError, ValidationError
from backend.app.lifecycle.aggregate import DecisionSession
from backend.app.lifecycle.soft_delete import UNDO_WINDOW_MS, Scheduler
from backend.app.llm.client import LLMClient
from backend.app.models.common import DecisionStatus, new_item_id, now_ms
from backend.app.models.decision import Decision
from backend.app.utils.logging import log_lifecycle_event

logger = logging.getLogger(__name__)


class DecisionStore:
    """Owns the ordered decision list (newest first).

    Sessions publish every new Decision value through replace(); the store
    swaps it into the list by id and rewrites persistence in full.
    """

    def __init__(
        self,
        repository: DecisionRepository,
        llm: LLMClient,
        *,
        undo_window_ms: int = UNDO_WINDOW_MS,
        scheduler: Scheduler | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._repository = repository
        self._llm = llm
        self._undo_window_ms = undo_window_ms
        self._scheduler = scheduler
        self._clock = clock
        self._decisions: list[Decision] = repository.load()
        self._sessions: dict[str, DecisionSession] = {}

    def create_decision(self, title: str, owner: str, deadline: str, context: str = "") -> Decision:
        """Open a new active decision.

        Raises:
            ValidationError: If title, owner or deadline is missing
        """
        missing = [
            name
            for name, value in (("title", title), ("owner", owner), ("deadline", deadline))
            if not value or not value.strip()
        ]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

        decision = Decision(
            id=new_item_id(),
            title=title.strip(),
            context=context.strip(),
            owner=owner.strip(),
            deadline=deadline.strip(),
            status=DecisionStatus.active,
            created_at=self._clock(),
        )
        self._decisions.insert(0, decision)
        self._persist()
        log_lifecycle_event(decision.id, "decision_created")
        return decision

    def list_decisions(self, status: DecisionStatus | None = None) -> list[Decision]:
        if status is None:
            return list(self._decisions)
        return [d for d in self._decisions if d.status == status]

    def get(self, decision_id: str) -> Decision:
        """Get decision by ID.

        Raises:
            NotFoundError: If no decision has this id
        """
        for decision in self._decisions:
            if decision.id == decision_id:
                return decision
        raise NotFoundError(f"Decision {decision_id} not found")

    def replace(self, decision: Decision) -> None:
        """Swap in a new value for an existing decision and persist."""
        for index, existing in enumerate(self._decisions):
            if existing.id == decision.id:
                self._decisions[index] = decision
                self._persist()
                return
        raise NotFoundError(f"Decision {decision.id} not found")

    def session(self, decision_id: str) -> DecisionSession:
        """Live session for a decision, created on first use."""
        session = self._sessions.get(decision_id)
        if session is None:
            session = DecisionSession(
                self.get(decision_id),
                commit=self.replace,
                llm=self._llm,
                undo_window_ms=self._undo_window_ms,
                scheduler=self._scheduler,
                clock=self._clock,
            )
            self._sessions[decision_id] = session
        return session

    def close(self) -> None:
        """Tear down every live session (cancels outstanding deletion timers)."""
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()

    def _persist(self) -> None:
        self._repository.save(self._decisions)
