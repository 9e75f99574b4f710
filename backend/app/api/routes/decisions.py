"""Decision endpoints - create/list/view, inputs, files, soft delete, status."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from backend.app.api.deps import get_session, get_store
from backend.app.lifecycle.aggregate import DecisionSession, DecisionView
from backend.app.lifecycle.store import DecisionStore
from backend.app.models.common import Confidence, DecisionStatus, InputType
from backend.app.models.decision import Decision, FileItem, InputItem
from backend.app.models.review import PendingDeletion

router = APIRouter(prefix="/decisions", tags=["decisions"])


class CreateDecisionRequest(BaseModel):
    """Request body for POST /decisions. Blank required fields are rejected by the store."""

    title: str = Field(..., description="The decision question")
    context: str = Field("", description="Why this is surfacing now")
    owner: str = Field(..., description="Decision owner")
    deadline: str = Field(..., description="Due date (YYYY-MM-DD)")


class DecisionListResponse(BaseModel):
    """Response for GET /decisions."""

    decisions: list[Decision]


class SetStatusRequest(BaseModel):
    """Request body for PATCH /decisions/{id}/status."""

    status: DecisionStatus


class AddInputRequest(BaseModel):
    """Request body for POST /decisions/{id}/inputs."""

    type: InputType = InputType.note
    content: str
    author: str | None = None
    source_reference: str | None = None
    confidence: Confidence | None = None


class AddFileRequest(BaseModel):
    """Request body for POST /decisions/{id}/files."""

    file_name: str
    file_text: str = ""


class UndoResponse(BaseModel):
    """Response for POST .../undo."""

    item_id: str
    undone: bool


Session = Annotated[DecisionSession, Depends(get_session)]


@router.post("", response_model=Decision, status_code=status.HTTP_201_CREATED)
async def create_decision(
    request: CreateDecisionRequest,
    store: Annotated[DecisionStore, Depends(get_store)],
) -> Decision:
    """Open a new decision log."""
    return store.create_decision(
        title=request.title,
        owner=request.owner,
        deadline=request.deadline,
        context=request.context,
    )


@router.get("", response_model=DecisionListResponse)
async def list_decisions(
    store: Annotated[DecisionStore, Depends(get_store)],
    status_filter: Annotated[DecisionStatus | None, Query(alias="status")] = None,
) -> DecisionListResponse:
    """List decisions, newest first, optionally filtered by status."""
    return DecisionListResponse(decisions=store.list_decisions(status_filter))


@router.get("/{decision_id}", response_model=DecisionView)
async def get_decision(session: Session) -> DecisionView:
    """Decision with timeline, staleness, pending deletions and open review."""
    return session.view()


@router.patch("/{decision_id}/status", response_model=Decision)
async def set_status(request: SetStatusRequest, session: Session) -> Decision:
    """Close or re-open a decision."""
    return session.set_status(request.status)


@router.post("/{decision_id}/inputs", response_model=InputItem, status_code=status.HTTP_201_CREATED)
async def add_input(request: AddInputRequest, session: Session) -> InputItem:
    """Record a hand-typed input."""
    return session.add_input(
        request.type,
        request.content,
        request.author,
        source_reference=request.source_reference,
        confidence=request.confidence,
    )


@router.post("/{decision_id}/files", response_model=FileItem, status_code=status.HTTP_201_CREATED)
async def add_file(request: AddFileRequest, session: Session) -> FileItem:
    """Attach a file record directly, without extraction or review."""
    return session.add_file(request.file_name, request.file_text)


@router.post("/{decision_id}/entries/{item_id}/confirm-delete", status_code=status.HTTP_204_NO_CONTENT)
async def request_confirm(item_id: str, session: Session) -> None:
    """Ask for delete confirmation on an entry."""
    session.request_confirm(item_id)


@router.delete("/{decision_id}/entries/{item_id}/confirm-delete", status_code=status.HTTP_204_NO_CONTENT)
async def dismiss_confirm(item_id: str, session: Session) -> None:
    """Back out of delete confirmation. Leaves any other entry awaiting confirmation alone."""
    session.dismiss_confirm(item_id)


@router.post(
    "/{decision_id}/entries/{item_id}/delete",
    response_model=PendingDeletion,
    status_code=status.HTTP_202_ACCEPTED,
)
async def delete_entry(item_id: str, session: Session) -> PendingDeletion:
    """Start the undo window for an input or file. Removal happens when it expires."""
    return session.delete_entry(item_id)


@router.post("/{decision_id}/entries/{item_id}/undo", response_model=UndoResponse)
async def undo_delete(item_id: str, session: Session) -> UndoResponse:
    """Cancel a pending deletion. Reports undone=false once the window has passed."""
    return UndoResponse(item_id=item_id, undone=session.undo_delete(item_id))
