"""FastAPI dependencies for the decision store and the LLM gateway."""

from typing import Annotated

from fastapi import Depends, Request

from backend.app.lifecycle.aggregate import DecisionSession
from backend.app.lifecycle.store import DecisionStore
from backend.app.llm.client import LLMClient


async def get_store(request: Request) -> DecisionStore:
    """Root decision store created in the application lifespan."""
    store: DecisionStore = request.app.state.store
    return store


async def get_llm(request: Request) -> LLMClient:
    """LLM gateway shared by the store and the stateless proxy routes."""
    llm: LLMClient = request.app.state.llm
    return llm


async def get_session(
    decision_id: str, store: Annotated[DecisionStore, Depends(get_store)]
) -> DecisionSession:
    """Live session for the decision named in the path.

    Runs on the event loop, like every lifecycle call, so concurrent first
    requests for one decision share a single session.

    Raises:
        NotFoundError: If the decision does not exist
    """
    return store.session(decision_id)
