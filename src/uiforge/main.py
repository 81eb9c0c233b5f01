"""
UIForge Service - Main Entry Point
HTTP surface for the chat pipeline: SSE chat, version history, health and metrics.
"""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response, StreamingResponse
from injector import Injector

from uiforge import __version__
from uiforge.core import Settings, configure_logging, create_container, get_logger, init_tracer
from uiforge.handlers import ChatHandler
from uiforge.monitoring import CONTENT_TYPE_LATEST, metrics_collector
from uiforge.services import ConversationStore


logger = get_logger(__name__)

SESSION_HEADER = "X-Session-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and tracing on startup."""
    settings: Settings = app.state.settings
    configure_logging(settings.log_level, settings.json_logs)
    init_tracer("uiforge")
    logger.info("starting", model=settings.gemini_model, version=__version__)
    yield
    logger.info("shutdown")


def create_app(container: Injector | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        container: Injector to resolve handlers from; a default one is
            created from environment settings when omitted

    Returns:
        Configured application
    """
    container = container or create_container()

    app = FastAPI(
        title="UIForge Service",
        description="Multi-stage LLM pipeline that turns chat messages into UI code",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = container.get(Settings)
    app.state.chat_handler = container.get(ChatHandler)
    app.state.store = container.get(ConversationStore)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[SESSION_HEADER],
    )

    @app.post("/api/chat")
    async def chat(request: Request, x_session_id: str | None = Header(default=None)):
        """Run the pipeline and stream stage/done/error events."""
        session_id = x_session_id or uuid.uuid4().hex
        try:
            body = await request.json()
        except ValueError:
            body = {}

        handler: ChatHandler = app.state.chat_handler
        return StreamingResponse(
            handler.stream(body, session_id),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no", SESSION_HEADER: session_id},
        )

    @app.get("/api/versions")
    async def list_versions(x_session_id: str | None = Header(default=None)):
        """Version history of the caller's session, newest first."""
        if not x_session_id:
            return {"versions": []}
        versions = await app.state.store.list_versions(x_session_id)
        return {"versions": [v.model_dump() for v in versions]}

    @app.post("/api/versions/{version_id}")
    async def rollback(version_id: int, x_session_id: str | None = Header(default=None)):
        """Make an earlier version the active one."""
        version = None
        if x_session_id:
            version = await app.state.store.activate_version(x_session_id, version_id)
        if version is None:
            raise HTTPException(status_code=404, detail="Version not found")
        return version.model_dump()

    @app.get("/api/messages")
    async def list_messages(x_session_id: str | None = Header(default=None)):
        """Chat history of the caller's session."""
        if not x_session_id:
            return {"messages": []}
        messages = await app.state.store.list_messages(x_session_id)
        return {"messages": [m.model_dump() for m in messages]}

    @app.get("/health")
    async def health():
        """Health check."""
        return {
            "status": "healthy",
            "service": "uiforge",
            "version": __version__,
            "model": app.state.settings.gemini_model,
            "timestamp": time.time(),
        }

    if app.state.settings.enable_metrics:

        @app.get("/metrics")
        async def metrics():
            """Prometheus exposition."""
            return Response(content=metrics_collector.get_metrics(), media_type=CONTENT_TYPE_LATEST)

    return app


def main() -> None:
    """Run the service with uvicorn."""
    import uvicorn

    settings = Settings()
    uvicorn.run(
        "uiforge.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
