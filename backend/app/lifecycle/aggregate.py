"""Decision aggregate - the mutation surface for a single decision.

A DecisionSession owns one Decision value together with its soft-delete
manager, staleness tracker and review engine. Every mutation builds a new
Decision (copy-on-write) and publishes it through the commit callback
exactly once, so observers see each operation as one state transition.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from backend.app.errors import AnalysisError, NotFoundError, StateError, ValidationError
from backend.app.lifecycle.review import ReviewEngine, file_type_of
from backend.app.lifecycle.soft_delete import UNDO_WINDOW_MS, Scheduler, SoftDeleteManager
from backend.app.lifecycle.staleness import StalenessTracker
from backend.app.llm.client import LLMClient
from backend.app.models.analysis import AIAnalysis
from backend.app.models.common import (
    Confidence,
    DecisionStatus,
    InputType,
    new_item_id,
    now_ms,
)
from backend.app.models.decision import (
    Decision,
    DecisionEntry,
    FileItem,
    InputItem,
    build_timeline,
)
from backend.app.models.review import PendingDeletion, ReviewBatch, ReviewCandidate, ReviewCommit
from backend.app.utils.logging import log_lifecycle_event
from backend.app.utils.metrics import record_lifecycle_event

logger = logging.getLogger(__name__)


class DecisionView(BaseModel):
    """Read model handed to clients: the decision plus its transient lifecycle state."""

    decision: Decision
    timeline: list[DecisionEntry] = Field(default_factory=list)
    stale: bool = False
    pending_deletions: list[PendingDeletion] = Field(default_factory=list)
    confirming_deletion: str | None = None
    review: ReviewBatch | None = None
    analyzing: bool = False


@dataclass
class BatchResult:
    """Outcome of add_batch: the committed items and how the follow-up synthesis went."""

    commit: ReviewCommit
    analysis: AIAnalysis | None = None
    analysis_error: str | None = None


class DecisionSession:
    """Live lifecycle state for one decision."""

    def __init__(
        self,
        decision: Decision,
        *,
        commit: Callable[[Decision], None],
        llm: LLMClient,
        undo_window_ms: int = UNDO_WINDOW_MS,
        scheduler: Scheduler | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        """Initialize session.

        Args:
            decision: Current persisted value of the decision
            commit: Receives every new Decision value (the root store's replace)
            llm: Extraction/synthesis gateway
            undo_window_ms: Soft-delete grace window
            scheduler: Timer source for soft deletes (defaults to the asyncio loop)
            clock: Epoch-millisecond clock
        """
        self._decision = decision
        self._commit = commit
        self._llm = llm
        self._clock = clock
        self._analyzing = False
        self._closed = False

        self.staleness = StalenessTracker()
        self.review = ReviewEngine(clock=clock)
        self.deletions = SoftDeleteManager(
            remove_input=self._remove_input,
            remove_file=self._remove_file,
            exists=self._has_entry,
            undo_window_ms=undo_window_ms,
            scheduler=scheduler,
            clock=clock,
        )

    @property
    def decision(self) -> Decision:
        return self._decision

    @property
    def analyzing(self) -> bool:
        return self._analyzing

    def view(self) -> DecisionView:
        """Snapshot of the decision and its lifecycle state."""
        return DecisionView(
            decision=self._decision,
            timeline=build_timeline(self._decision),
            stale=self.staleness.stale,
            pending_deletions=self.deletions.pending,
            confirming_deletion=self.deletions.confirming,
            review=self.review.batch,
            analyzing=self._analyzing,
        )

    # --- inputs and files -------------------------------------------------

    def add_input(
        self,
        input_type: InputType,
        content: str,
        author: str | None = None,
        *,
        source_reference: str | None = None,
        confidence: Confidence | None = None,
    ) -> InputItem:
        """Append a hand-typed input.

        Raises:
            ValidationError: If content is blank
        """
        content = content.strip()
        if not content:
            raise ValidationError("Input content is required")

        item = InputItem(
            id=new_item_id(),
            type=input_type,
            content=content,
            author=(author or "").strip() or self._decision.owner,
            timestamp=self._clock(),
            source_reference=source_reference,
            confidence=confidence,
        )
        self._apply(inputs=(*self._decision.inputs, item))
        return item

    def add_file(self, file_name: str, file_text: str) -> FileItem:
        """Append a file record without review.

        Raises:
            ValidationError: If file_name is blank
        """
        file_name = file_name.strip()
        if not file_name:
            raise ValidationError("File name is required")

        item = FileItem(
            id=new_item_id(),
            file_name=file_name,
            file_type=file_type_of(file_name),
            file_text=file_text,
            timestamp=self._clock(),
        )
        self._apply(files=(*self._decision.files, item))
        return item

    # --- upload review ----------------------------------------------------

    async def stage_upload(self, file_name: str, raw_text: str) -> ReviewBatch:
        """Extract suggested inputs from a document and open them for review.

        Nothing is staged unless extraction succeeds.

        Raises:
            ValidationError: If the document has no text
            StateError: If another review is still open
            ExtractionError: If the extraction call fails
        """
        if self.review.is_open:
            raise StateError("Review already in progress")
        if not raw_text.strip():
            raise ValidationError("Empty document")

        result = await self._llm.extract_inputs(file_name=file_name, raw_text=raw_text)

        batch = self.review.stage(
            file_name,
            raw_text,
            result.document_summary,
            [
                ReviewCandidate(
                    type=suggestion.type,
                    content=suggestion.text,
                    source_reference=suggestion.source_ref,
                    confidence=suggestion.confidence,
                )
                for suggestion in result.inputs
            ],
        )
        log_lifecycle_event(
            self._decision.id, "review_staged", file_name=file_name, candidates=len(batch.candidates)
        )
        return batch

    def confirm_review(self) -> ReviewCommit:
        """Commit the open review: file, summary note and accepted inputs in one update.

        Raises:
            StateError: If no review is open
        """
        commit = self.review.confirm()
        self._apply(
            inputs=(*self._decision.inputs, *commit.all_inputs),
            files=(*self._decision.files, commit.file),
        )
        log_lifecycle_event(
            self._decision.id,
            "review_committed",
            file_name=commit.file.file_name,
            inputs=len(commit.all_inputs),
        )
        return commit

    def cancel_review(self) -> bool:
        return self.review.cancel()

    async def add_batch(self) -> BatchResult:
        """Confirm the open review, then re-synthesize against the updated inputs.

        The batch stays committed when synthesis fails; the failure is
        reported in the result.
        """
        commit = self.confirm_review()
        try:
            analysis = await self.run_analysis()
        except (AnalysisError, StateError) as e:
            logger.warning(f"Synthesis after batch commit failed for {self._decision.id}: {e}")
            return BatchResult(commit=commit, analysis_error=str(e))
        return BatchResult(commit=commit, analysis=analysis)

    # --- soft delete --------------------------------------------------------

    def request_confirm(self, item_id: str) -> None:
        self._locate(item_id)
        self.deletions.request_confirm(item_id)

    def dismiss_confirm(self, item_id: str) -> bool:
        return self.deletions.dismiss_confirm(item_id)

    def delete_input(self, item_id: str) -> PendingDeletion:
        if self._decision.find_input(item_id) is None:
            raise NotFoundError(f"Input {item_id} not found")
        return self.deletions.request_delete(item_id, is_file=False)

    def delete_file(self, item_id: str) -> PendingDeletion:
        if self._decision.find_file(item_id) is None:
            raise NotFoundError(f"File {item_id} not found")
        return self.deletions.request_delete(item_id, is_file=True)

    def delete_entry(self, item_id: str) -> PendingDeletion:
        """Start the undo window for an input or a file, whichever the id names."""
        if isinstance(self._locate(item_id), FileItem):
            return self.delete_file(item_id)
        return self.delete_input(item_id)

    def undo_delete(self, item_id: str) -> bool:
        return self.deletions.cancel(item_id)

    def _remove_input(self, item_id: str) -> None:
        item = self._decision.find_input(item_id)
        if item is None:
            return
        self.staleness.on_item_removed(item.timestamp, self._decision.last_analysis_update)
        self._apply(inputs=tuple(i for i in self._decision.inputs if i.id != item_id))
        log_lifecycle_event(self._decision.id, "input_removed", item_id=item_id)

    def _remove_file(self, item_id: str) -> None:
        item = self._decision.find_file(item_id)
        if item is None:
            return
        self.staleness.on_item_removed(item.timestamp, self._decision.last_analysis_update)
        self._apply(files=tuple(f for f in self._decision.files if f.id != item_id))
        log_lifecycle_event(self._decision.id, "file_removed", item_id=item_id)

    # --- status and analysis ------------------------------------------------

    def set_status(self, status: DecisionStatus) -> Decision:
        return self._apply(status=status)

    def toggle_status(self) -> Decision:
        if self._decision.status == DecisionStatus.active:
            return self.set_status(DecisionStatus.completed)
        return self.set_status(DecisionStatus.active)

    def record_analysis(self, result: AIAnalysis) -> Decision:
        """Store a synthesis result and clear staleness."""
        updated = self._apply(ai_analysis=result, last_analysis_update=self._clock())
        self.staleness.on_analysis_completed()
        record_lifecycle_event("analysis_recorded")
        return updated

    async def run_analysis(self) -> AIAnalysis:
        """Request a synthesis of the current inputs and record it.

        On failure the stored analysis is left untouched. A result arriving
        after close() is discarded.

        Raises:
            StateError: If an analysis is already running for this decision
            AnalysisError: If the synthesis call fails
        """
        if self._analyzing:
            raise StateError("Analysis already in progress")

        self._analyzing = True
        try:
            result = await self._llm.analyze_decision(decision=self._decision)
        finally:
            self._analyzing = False

        if self._closed:
            logger.info(f"Discarding analysis for closed decision {self._decision.id}")
            return result

        self.record_analysis(result)
        return result

    def close(self) -> None:
        """Tear down: cancel outstanding deletion timers and drop any open review."""
        self._closed = True
        canceled = self.deletions.cancel_all()
        self.review.cancel()
        if canceled:
            logger.info(f"Canceled {canceled} pending deletion(s) for {self._decision.id}")

    # --- internals ----------------------------------------------------------

    def _has_entry(self, item_id: str) -> bool:
        return (
            self._decision.find_input(item_id) is not None
            or self._decision.find_file(item_id) is not None
        )

    def _locate(self, item_id: str) -> InputItem | FileItem:
        item = self._decision.find_input(item_id) or self._decision.find_file(item_id)
        if item is None:
            raise NotFoundError(f"Entry {item_id} not found")
        return item

    def _apply(self, **changes: Any) -> Decision:
        updated = self._decision.model_copy(update=changes)
        self._decision = updated
        self._commit(updated)
        return updated
