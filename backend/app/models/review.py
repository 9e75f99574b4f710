"""Transient lifecycle models: pending deletions and review batches."""

from pydantic import BaseModel, Field

from backend.app.models.common import Confidence, InputType
from backend.app.models.decision import FileItem, InputItem


class PendingDeletion(BaseModel):
    """Item waiting out its undo window. Never persisted."""

    item_id: str
    is_file: bool
    expires_at: int = Field(..., description="Epoch milliseconds when removal fires")


class ReviewCandidate(BaseModel):
    """Machine-suggested input awaiting user review."""

    type: InputType = InputType.note
    content: str
    source_reference: str | None = None
    confidence: Confidence | None = None


class ReviewBatch(BaseModel):
    """One uploaded file's extraction, open from extraction until confirm/cancel."""

    file_name: str
    raw_text: str
    document_summary: str
    candidates: list[ReviewCandidate] = Field(default_factory=list)


class ReviewCommit(BaseModel):
    """Everything a confirmed batch appends to a Decision, applied as one update."""

    file: FileItem
    summary: InputItem
    inputs: list[InputItem] = Field(default_factory=list)

    @property
    def all_inputs(self) -> list[InputItem]:
        return [self.summary, *self.inputs]
