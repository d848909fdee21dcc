"""FastAPI application main entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from .middleware import SetupGateMiddleware, register_error_handlers  # noqa: E402
from .routes import ai, files, images, notes, profile, system, videos  # noqa: E402
from ..services.config import get_config  # noqa: E402
from ..services.container import get_services  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler to run startup tasks."""
    config = get_config()
    system.install_log_buffer(config.log_level)
    if not config.identity_configured:
        logger.warning("Identity provider is not configured; serving setup instructions")
    get_services()
    logger.info("Startup complete: document and object stores ready")
    yield


app = FastAPI(
    title="AI Playground API",
    description="Image generation, vision, transcription and a personal gallery",
    version="0.1.0",
    lifespan=lifespan,
)

config = get_config()

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Added last so it runs first: the gate answers before CORS or routing
app.add_middleware(SetupGateMiddleware)

register_error_handlers(app)

app.include_router(ai.router)
app.include_router(images.router)
app.include_router(notes.router)
app.include_router(profile.router)
app.include_router(videos.router)
app.include_router(files.router)
app.include_router(system.router, tags=["system"])


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


__all__ = ["app"]
