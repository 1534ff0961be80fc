"""FastAPI main application for the Living History Engine."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chronos import __version__
from chronos.config import Config
from chronos.core.errors import SessionBusyError, SessionNotStartedError, UnknownEntityError
from chronos.core.session_manager import get_session_registry
from chronos.logging_config import setup_logging

from .routes import game

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    setup_logging(Config.LOG_LEVEL)
    for issue in Config.validate():
        logger.warning(issue)
    logger.info("Living History Engine starting up")
    yield
    # Shutdown: cancel media work and stop every session's store
    await get_session_registry().close_all()
    logger.info("Living History Engine shut down cleanly")


# Create FastAPI app
app = FastAPI(
    title="Living History Engine API",
    description="Historical simulation orchestrated over Gemini text, image and Veo video generation",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Session errors ───────────────────────────────────────────────────

@app.exception_handler(SessionBusyError)
async def session_busy_handler(request: Request, exc: SessionBusyError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(SessionNotStartedError)
async def session_not_started_handler(request: Request, exc: SessionNotStartedError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(UnknownEntityError)
async def unknown_entity_handler(request: Request, exc: UnknownEntityError):
    return JSONResponse(status_code=404, content={"detail": str(exc), "kind": exc.kind})


# Include routers
app.include_router(game.router, prefix="/api/game", tags=["Game"])


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": __version__,
        "api_key_configured": bool(Config.GOOGLE_API_KEY),
    }
