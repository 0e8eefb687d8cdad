"""FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.tripply.adapters.transcripts import TranscriptFetcher
from backend.tripply.adapters.youtube import YouTubeClient
from backend.tripply.api.routes.chat import router as chat_router
from backend.tripply.api.routes.health import router as health_router
from backend.tripply.api.routes.metrics import router as metrics_router
from backend.tripply.config import Settings, get_settings, secret_value
from backend.tripply.llm.client import get_chat_model
from backend.tripply.orchestration.chat import ChatOrchestrator
from backend.tripply.tools.catalog import build_default_registry
from backend.tripply.tools.executor import ToolExecutor
from backend.tripply.utils.logging import StructuredToolLogger, configure_logging
from backend.tripply.utils.metrics import PrometheusToolMetrics
from backend.tripply.video.pipeline import VideoPipeline

logger = logging.getLogger(__name__)


def build_orchestrator(settings: Settings, http_client: httpx.AsyncClient) -> ChatOrchestrator:
    """Wire the model, tools and video pipeline for one process."""
    model = get_chat_model(settings)
    youtube = YouTubeClient(secret_value(settings.youtube_api_key), client=http_client)
    video_pipeline = None
    if youtube.configured:
        transcripts = TranscriptFetcher(char_limit=settings.transcript_char_limit)
        video_pipeline = VideoPipeline(model, youtube, transcripts, settings)
    else:
        logger.warning("No YouTube API key configured, video enrichment disabled")

    registry = build_default_registry(settings, http_client, video_pipeline)
    executor = ToolExecutor(
        registry,
        timeout_ms=settings.tool_timeout_ms,
        metrics=PrometheusToolMetrics(),
        logger=StructuredToolLogger(),
    )
    return ChatOrchestrator(model, executor, settings, video_pipeline=video_pipeline)


def create_app(
    settings: Settings | None = None,
    orchestrator: ChatOrchestrator | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings (optional, defaults to environment)
        orchestrator: Prebuilt orchestrator (optional; built at startup otherwise)
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "orchestrator", None) is not None:
            yield
            return
        async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as http_client:
            app.state.orchestrator = build_orchestrator(settings, http_client)
            yield
            app.state.orchestrator = None

    app = FastAPI(title="Tripply Chat API", version="0.1.0", lifespan=lifespan)
    app.state.orchestrator = orchestrator
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.ui_origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(chat_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "Tripply Chat API", "version": "0.1.0"}

    return app


app = create_app()
