"""Review and merge of machine-suggested inputs for one uploaded file."""

import logging
from collections.abc import Callable, Sequence
from pathlib import PurePath

from backend.app.errors import StateError, ValidationError
from backend.app.models.common import (
    MAX_SUGGESTED_INPUT_CHARS,
    InputType,
    new_item_id,
    now_ms,
)
from backend.app.models.decision import FileItem, InputItem
from backend.app.models.review import ReviewBatch, ReviewCandidate, ReviewCommit
from backend.app.utils.metrics import record_lifecycle_event

logger = logging.getLogger(__name__)

SUMMARY_PREFIX = "[Summary] "
SUMMARY_SOURCE_REFERENCE = "Document Summary"


def file_provenance(file_name: str) -> str:
    """Author tag stamped on every input derived from a file."""
    return f"File: {file_name}"


def file_type_of(file_name: str) -> str:
    """Lowercased extension of a file name, or "unknown" when it has none."""
    suffix = PurePath(file_name).suffix
    return suffix[1:].lower() if len(suffix) > 1 else "unknown"


class ReviewEngine:
    """Holds at most one ReviewBatch between extraction and confirm/cancel.

    Candidate edits mutate the staged batch in place. confirm() builds every
    item the batch contributes and returns them together so the caller can
    apply them to the decision in a single update.
    """

    def __init__(self, *, clock: Callable[[], int] = now_ms) -> None:
        self._clock = clock
        self._batch: ReviewBatch | None = None

    @property
    def batch(self) -> ReviewBatch | None:
        return self._batch

    @property
    def is_open(self) -> bool:
        return self._batch is not None

    def stage(
        self,
        file_name: str,
        raw_text: str,
        document_summary: str,
        candidates: Sequence[ReviewCandidate],
    ) -> ReviewBatch:
        """Open a review batch.

        Raises:
            StateError: If another batch is still under review
        """
        if self._batch is not None:
            raise StateError("Review already in progress")

        self._batch = ReviewBatch(
            file_name=file_name,
            raw_text=raw_text,
            document_summary=document_summary,
            candidates=[
                c.model_copy(update={"content": c.content[:MAX_SUGGESTED_INPUT_CHARS]})
                for c in candidates
            ],
        )
        return self._batch

    def candidate(self, index: int) -> ReviewCandidate:
        batch = self._require_batch()
        self._check_index(batch, index)
        return batch.candidates[index]

    def update_content(self, index: int, text: str) -> ReviewCandidate:
        """Replace a candidate's text.

        Raises:
            ValidationError: If text exceeds the suggested-input cap
        """
        if len(text) > MAX_SUGGESTED_INPUT_CHARS:
            raise ValidationError(
                f"Suggested inputs are limited to {MAX_SUGGESTED_INPUT_CHARS} characters"
            )
        return self._replace(index, content=text)

    def update_type(self, index: int, input_type: InputType) -> ReviewCandidate:
        return self._replace(index, type=input_type)

    def remove(self, index: int) -> ReviewCandidate:
        batch = self._require_batch()
        self._check_index(batch, index)
        return batch.candidates.pop(index)

    def confirm(self) -> ReviewCommit:
        """Close the batch and build the file record, summary note and inputs.

        Raises:
            StateError: If no batch is open (e.g. already confirmed)
        """
        batch = self._require_batch()
        self._batch = None

        now = self._clock()
        author = file_provenance(batch.file_name)

        file_item = FileItem(
            id=new_item_id(),
            file_name=batch.file_name,
            file_type=file_type_of(batch.file_name),
            file_text=batch.raw_text,
            timestamp=now,
        )
        summary = InputItem(
            id=new_item_id(),
            type=InputType.note,
            content=f"{SUMMARY_PREFIX}{batch.document_summary}",
            author=author,
            timestamp=now,
            source_reference=SUMMARY_SOURCE_REFERENCE,
        )
        inputs = [
            InputItem(
                id=new_item_id(),
                type=candidate.type,
                content=candidate.content,
                author=author,
                timestamp=now,
                source_reference=candidate.source_reference,
                confidence=candidate.confidence,
            )
            for candidate in batch.candidates
        ]

        record_lifecycle_event("review_confirmed")
        logger.info(f"Review confirmed for {batch.file_name}: {len(inputs)} inputs accepted")
        return ReviewCommit(file=file_item, summary=summary, inputs=inputs)

    def cancel(self) -> bool:
        """Discard the open batch. Returns False when nothing was open."""
        if self._batch is None:
            return False
        self._batch = None
        record_lifecycle_event("review_canceled")
        return True

    def _replace(self, index: int, **changes: object) -> ReviewCandidate:
        batch = self._require_batch()
        self._check_index(batch, index)
        updated = batch.candidates[index].model_copy(update=changes)
        batch.candidates[index] = updated
        return updated

    def _require_batch(self) -> ReviewBatch:
        if self._batch is None:
            raise StateError("No review in progress")
        return self._batch

    @staticmethod
    def _check_index(batch: ReviewBatch, index: int) -> None:
        if not 0 <= index < len(batch.candidates):
            raise StateError(f"No candidate at index {index}")
