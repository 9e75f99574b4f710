"""In-memory implementations of repository interfaces."""

from backend.app.models.decision import Decision


class InMemoryDecisionRepository:
    """In-memory implementation of DecisionRepository."""

    def __init__(self, decisions: list[Decision] | None = None) -> None:
        self._decisions: list[Decision] = list(decisions or [])
        self.save_count = 0

    def load(self) -> list[Decision]:
        """Load all decisions."""
        return list(self._decisions)

    def save(self, decisions: list[Decision]) -> None:
        """Replace the stored list."""
        self._decisions = list(decisions)
        self.save_count += 1
