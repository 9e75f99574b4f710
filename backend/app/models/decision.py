"""Decision domain models and the read-side timeline projection."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from backend.app.models.analysis import AIAnalysis
from backend.app.models.common import Confidence, DecisionStatus, InputType


class InputItem(BaseModel):
    """Atomic decision input. Replaced wholesale, never edited in place."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: InputType
    content: str
    author: str
    timestamp: int = Field(..., description="Creation instant, epoch milliseconds")
    source_reference: str | None = Field(None, description='e.g. "Page 4", "Slide 2"')
    confidence: Confidence | None = None


class FileItem(BaseModel):
    """Ingested document. Full text is retained for traceability."""

    model_config = ConfigDict(frozen=True)

    id: str
    file_name: str
    file_type: str
    file_text: str
    timestamp: int


class Decision(BaseModel):
    """Top-level decision record.

    Frozen: every mutation goes through model_copy(update=...) so a reader
    holding a Decision never observes a partial update. Serialized with
    camelCase aliases (createdAt, aiAnalysis, lastAnalysisUpdate).
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    context: str = ""
    owner: str
    deadline: str
    status: DecisionStatus = DecisionStatus.active
    created_at: int
    inputs: tuple[InputItem, ...] = ()
    files: tuple[FileItem, ...] = ()
    ai_analysis: AIAnalysis | None = None
    last_analysis_update: int | None = None

    def find_input(self, item_id: str) -> InputItem | None:
        return next((i for i in self.inputs if i.id == item_id), None)

    def find_file(self, item_id: str) -> FileItem | None:
        return next((f for f in self.files if f.id == item_id), None)


class InputEntry(BaseModel):
    """Timeline entry wrapping an input."""

    kind: Literal["input"] = "input"
    item: InputItem


class FileEntry(BaseModel):
    """Timeline entry wrapping a file."""

    kind: Literal["file"] = "file"
    item: FileItem


DecisionEntry = Annotated[InputEntry | FileEntry, Field(discriminator="kind")]


def build_timeline(decision: Decision) -> list[DecisionEntry]:
    """Merge inputs and files into one list, newest first.

    Pure projection: the decision's own sequences are left untouched.
    Python's sort is stable, so entries sharing a timestamp keep inputs
    ahead of files in their stored order.
    """
    entries: list[DecisionEntry] = [InputEntry(item=i) for i in decision.inputs]
    entries.extend(FileEntry(item=f) for f in decision.files)
    return sorted(entries, key=lambda e: e.item.timestamp, reverse=True)
