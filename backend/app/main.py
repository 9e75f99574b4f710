"""FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.api.routes.decisions import router as decisions_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.api.routes.proxy import router as proxy_router
from backend.app.api.routes.review import router as review_router
from backend.app.config import Settings, get_settings
from backend.app.db.inmemory import InMemoryDecisionRepository
from backend.app.db.json_store import JsonFileDecisionRepository
from backend.app.db.repositories import DecisionRepository
from backend.app.errors import SignalError
from backend.app.lifecycle.store import DecisionStore
from backend.app.llm.client import LLMClient, get_llm_client

logger = logging.getLogger(__name__)


def build_repository(settings: Settings) -> DecisionRepository:
    """JSON file storage when a path is configured, in-memory otherwise."""
    if settings.storage_path:
        return JsonFileDecisionRepository(settings.storage_path, key=settings.storage_key)
    logger.warning("No STORAGE_PATH configured, decisions will not survive a restart")
    return InMemoryDecisionRepository()


def create_app(store: DecisionStore | None = None, llm: LLMClient | None = None) -> FastAPI:
    """Build the application.

    Args:
        store: Pre-built decision store (tests); built from settings when omitted
        llm: LLM gateway; chosen from settings when omitted
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        gateway = llm or get_llm_client(settings)
        app.state.llm = gateway
        app.state.store = store or DecisionStore(
            build_repository(settings),
            gateway,
            undo_window_ms=settings.undo_window_ms,
        )
        yield
        app.state.store.close()

    app = FastAPI(title="Signal API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.ui_origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SignalError)
    async def signal_error_handler(request: Request, exc: SignalError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "message": str(exc)},
        )

    # Register routes
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(proxy_router)
    app.include_router(decisions_router)
    app.include_router(review_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "Signal API", "version": "0.1.0"}

    return app


app = create_app()
