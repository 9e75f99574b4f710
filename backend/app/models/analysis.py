"""LLM output contracts: document extraction and decision synthesis.

Model output is loosely shaped JSON; validators here coerce it into the
strict contract (enum casing, 240-char cap, missing lists) so the rest of the
service never sees raw model payloads.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from backend.app.models.common import MAX_SUGGESTED_INPUT_CHARS, Confidence, InputType


class ExtractedInput(BaseModel):
    """Single atomic input suggested by the extraction model."""

    type: InputType = InputType.note
    text: str = Field(..., max_length=MAX_SUGGESTED_INPUT_CHARS)
    source_ref: str | None = None
    confidence: Confidence | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in InputType.__members__:
                return normalized
        return InputType.note

    @field_validator("confidence", mode="before")
    @classmethod
    def _coerce_confidence(cls, value: Any) -> Any:
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in Confidence.__members__:
                return normalized
        return None

    @field_validator("text", mode="before")
    @classmethod
    def _cap_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()[:MAX_SUGGESTED_INPUT_CHARS]
        return value


class ExtractionResult(BaseModel):
    """Output of the extract operation."""

    document_summary: str = ""
    inputs: list[ExtractedInput] = Field(default_factory=list)

    @field_validator("inputs", mode="before")
    @classmethod
    def _drop_empty(cls, value: Any) -> Any:
        # Items without text carry nothing to review
        if isinstance(value, list):
            return [
                item
                for item in value
                if not isinstance(item, dict) or str(item.get("text") or "").strip()
            ]
        return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Tension(_CamelModel):
    """Two competing poles of a decision and what each side gains or loses."""

    name_x: str = ""
    name_y: str = ""
    reason_x: str = ""
    reason_y: str = ""
    gain_if_x: str = ""
    gain_if_y: str = ""
    loss_if_x: str = ""
    loss_if_y: str = ""


class StrategicOption(_CamelModel):
    """A strategic stance the decision owner could take."""

    name: str = ""
    description: str = ""
    tradeoffs: str = ""
    commitment_do: list[str] = Field(default_factory=list)
    commitment_dont: list[str] = Field(default_factory=list)
    future_impact: str = ""


_EXTRACTED_TYPES = {"Evidence", "Assumption", "Concern", "Note", "Question"}
_EXTRACTED_CONFIDENCES = {"High", "Medium", "Low"}


class ExtractedItem(BaseModel):
    """Traceable statement surfaced by the synthesis, with its citation."""

    type: Literal["Evidence", "Assumption", "Concern", "Note", "Question"] = "Note"
    statement: str = ""
    source_citation: str = ""
    confidence: Literal["High", "Medium", "Low"] = "Medium"

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> Any:
        normalized = str(value or "").strip().capitalize()
        return normalized if normalized in _EXTRACTED_TYPES else "Note"

    @field_validator("confidence", mode="before")
    @classmethod
    def _coerce_confidence(cls, value: Any) -> Any:
        normalized = str(value or "").strip().capitalize()
        return normalized if normalized in _EXTRACTED_CONFIDENCES else "Medium"


class AIAnalysis(_CamelModel):
    """Synthesis result stored on a Decision."""

    situation_summary: str
    why_hard: str
    forces: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    hidden_assumptions: list[str] = Field(default_factory=list)
    unknowns: list[str] = Field(default_factory=list)
    tensions: list[Tension] = Field(default_factory=list)
    options: list[StrategicOption] = Field(default_factory=list)
    file_extractions: list[ExtractedItem] = Field(default_factory=list)
