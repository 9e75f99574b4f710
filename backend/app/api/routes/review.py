"""Upload review and synthesis endpoints.

POST /decisions/{id}/uploads stages an extraction for review; the candidate
routes edit it; POST .../review/confirm commits it and re-synthesizes.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from backend.app.api.deps import get_session
from backend.app.errors import ValidationError
from backend.app.lifecycle.aggregate import DecisionSession
from backend.app.models.analysis import AIAnalysis
from backend.app.models.common import InputType
from backend.app.models.decision import FileItem, InputItem
from backend.app.models.review import ReviewBatch, ReviewCandidate

router = APIRouter(prefix="/decisions/{decision_id}", tags=["review"])

Session = Annotated[DecisionSession, Depends(get_session)]


class UploadRequest(BaseModel):
    """Request body for POST /decisions/{id}/uploads."""

    file_name: str = Field(..., min_length=1)
    raw_text: str = Field(..., description="Text already extracted from the document")


class UpdateCandidateRequest(BaseModel):
    """Request body for PATCH /decisions/{id}/review/candidates/{index}."""

    content: str | None = None
    type: InputType | None = None


class ConfirmReviewResponse(BaseModel):
    """Response for POST /decisions/{id}/review/confirm."""

    file: FileItem
    inputs: list[InputItem]
    analysis: AIAnalysis | None = None
    analysis_error: str | None = None


@router.post("/uploads", response_model=ReviewBatch, status_code=status.HTTP_201_CREATED)
async def upload(request: UploadRequest, session: Session) -> ReviewBatch:
    """Extract suggested inputs from a document and open them for review."""
    return await session.stage_upload(request.file_name, request.raw_text)


@router.get("/review", response_model=ReviewBatch | None)
async def get_review(session: Session) -> ReviewBatch | None:
    """Open review batch, if any."""
    return session.review.batch


@router.patch("/review/candidates/{index}", response_model=ReviewCandidate)
async def update_candidate(
    index: int, request: UpdateCandidateRequest, session: Session
) -> ReviewCandidate:
    """Edit a candidate's text and/or type."""
    if request.content is None and request.type is None:
        raise ValidationError("Nothing to update: provide content or type")
    if request.content is not None:
        session.review.update_content(index, request.content)
    if request.type is not None:
        session.review.update_type(index, request.type)
    return session.review.candidate(index)


@router.delete("/review/candidates/{index}", response_model=ReviewCandidate)
async def remove_candidate(index: int, session: Session) -> ReviewCandidate:
    """Drop a candidate from the batch."""
    return session.review.remove(index)


@router.post("/review/confirm", response_model=ConfirmReviewResponse)
async def confirm_review(session: Session) -> ConfirmReviewResponse:
    """Commit the batch and re-synthesize against the updated inputs."""
    result = await session.add_batch()
    return ConfirmReviewResponse(
        file=result.commit.file,
        inputs=result.commit.all_inputs,
        analysis=result.analysis,
        analysis_error=result.analysis_error,
    )


@router.delete("/review", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_review(session: Session) -> None:
    """Discard the open batch without touching the decision."""
    session.cancel_review()


@router.post("/analysis", response_model=AIAnalysis)
async def run_analysis(session: Session) -> AIAnalysis:
    """Run a synthesis of the decision's current inputs."""
    return await session.run_analysis()
