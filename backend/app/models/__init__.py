"""Models package - re-exports for convenience."""

from backend.app.models.analysis import (
    AIAnalysis,
    ExtractedInput,
    ExtractedItem,
    ExtractionResult,
    StrategicOption,
    Tension,
)
from backend.app.models.common import (
    MAX_SUGGESTED_INPUT_CHARS,
    Confidence,
    DecisionStatus,
    InputType,
)
from backend.app.models.decision import (
    Decision,
    DecisionEntry,
    FileEntry,
    FileItem,
    InputEntry,
    InputItem,
    build_timeline,
)
from backend.app.models.review import (
    PendingDeletion,
    ReviewBatch,
    ReviewCandidate,
    ReviewCommit,
)

__all__ = [
    # Common
    "MAX_SUGGESTED_INPUT_CHARS",
    "InputType",
    "Confidence",
    "DecisionStatus",
    # Decision
    "Decision",
    "InputItem",
    "FileItem",
    "DecisionEntry",
    "InputEntry",
    "FileEntry",
    "build_timeline",
    # Analysis
    "AIAnalysis",
    "Tension",
    "StrategicOption",
    "ExtractedItem",
    "ExtractionResult",
    "ExtractedInput",
    # Review
    "PendingDeletion",
    "ReviewBatch",
    "ReviewCandidate",
    "ReviewCommit",
]
