"""Common types and enums shared across all models."""

import time
import uuid
from enum import Enum

# Hard cap for machine-suggested inputs (extraction output and review edits)
MAX_SUGGESTED_INPUT_CHARS = 240


class InputType(str, Enum):
    """Kind of atomic decision input."""

    note = "note"
    concern = "concern"
    evidence = "evidence"
    assumption = "assumption"
    question = "question"
    link = "link"


class Confidence(str, Enum):
    """Confidence attached to a machine-suggested input."""

    high = "high"
    medium = "medium"
    low = "low"


class DecisionStatus(str, Enum):
    """Decision lifecycle status. Archival is expressed via completed."""

    active = "active"
    completed = "completed"


def now_ms() -> int:
    """Current instant as epoch milliseconds."""
    return int(time.time() * 1000)


def new_item_id() -> str:
    """Fresh opaque id for decisions, inputs and files."""
    return uuid.uuid4().hex
