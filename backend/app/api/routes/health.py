"""Health check endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from backend.app.api.deps import get_llm, get_store
from backend.app.lifecycle.store import DecisionStore
from backend.app.llm.client import LLMClient, OpenAIClient

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/api/health")
async def api_health(
    store: Annotated[DecisionStore, Depends(get_store)],
    llm: Annotated[LLMClient, Depends(get_llm)],
) -> dict[str, Any]:
    """Health check with component details.

    Returns:
        Status plus which LLM backend is active and how many decisions are loaded
    """
    return {
        "status": "ok",
        "message": "Backend server is running",
        "components": {
            "llm": "openai" if isinstance(llm, OpenAIClient) else "stub",
            "decisions": len(store.list_decisions()),
        },
    }
