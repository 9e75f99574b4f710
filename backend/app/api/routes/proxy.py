"""Stateless LLM proxy endpoints - POST /api/extract, POST /api/analyze."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from backend.app.api.deps import get_llm
from backend.app.llm.client import LLMClient
from backend.app.models.analysis import AIAnalysis, ExtractionResult
from backend.app.models.decision import Decision

router = APIRouter(prefix="/api", tags=["proxy"])


class ExtractRequest(BaseModel):
    """Request body for POST /api/extract."""

    model_config = ConfigDict(populate_by_name=True)

    file_name: str | None = Field(None, alias="fileName")
    raw_text: str | None = Field(None, alias="rawText")


class AnalyzeRequest(BaseModel):
    """Request body for POST /api/analyze."""

    decision: Decision | None = None


@router.post("/extract", response_model=ExtractionResult)
async def extract(
    request: ExtractRequest,
    llm: Annotated[LLMClient, Depends(get_llm)],
) -> ExtractionResult:
    """Break raw document text into suggested atomic inputs.

    Raises:
        HTTPException: 400 if fileName or rawText is missing
    """
    if not request.file_name or not request.raw_text:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="fileName and rawText are required",
        )
    return await llm.extract_inputs(file_name=request.file_name, raw_text=request.raw_text)


@router.post("/analyze", response_model=AIAnalysis)
async def analyze(
    request: AnalyzeRequest,
    llm: Annotated[LLMClient, Depends(get_llm)],
) -> AIAnalysis:
    """Synthesize a decision supplied in full by the caller.

    Raises:
        HTTPException: 400 if decision is missing
    """
    if request.decision is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="decision is required",
        )
    return await llm.analyze_decision(decision=request.decision)
