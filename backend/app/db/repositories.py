"""Repository protocol interfaces for decision persistence."""

from typing import Protocol

from backend.app.models.decision import Decision


class DecisionRepository(Protocol):
    """Stores the full ordered decision list as a single unit.

    Every save rewrites the whole list; there is no incremental diffing and
    no schema versioning.
    """

    def load(self) -> list[Decision]:
        """Load all decisions.

        Returns:
            Decisions in stored order (newest first), empty if nothing saved yet
        """
        ...

    def save(self, decisions: list[Decision]) -> None:
        """Replace the stored list.

        Args:
            decisions: Full ordered decision list
        """
        ...
