"""FastAPI backend for Imposter Kings."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kings_engine.errors import InvariantViolation
from web.api.routes import games

logger = logging.getLogger(__name__)

DEFAULT_ORIGINS = ("http://localhost:5173", "http://localhost:3000")


def allowed_origins() -> list[str]:
    """Frontend origins from ``CORS_ORIGINS`` (comma separated) and ``FRONTEND_URL``."""
    configured = os.environ.get("CORS_ORIGINS")
    origins = [o.strip() for o in configured.split(",") if o.strip()] if configured else list(DEFAULT_ORIGINS)
    frontend = os.environ.get("FRONTEND_URL")
    if frontend and frontend not in origins:
        origins.append(frontend)
    return origins


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Imposter Kings API starting")
    yield
    from web.api.session_manager import session_manager

    logger.info("Imposter Kings API shutting down (%d sessions)", len(session_manager.list_sessions()))


app = FastAPI(
    title="Imposter Kings API",
    description="API for playing Imposter Kings against people or bots",
    version="0.1.0",
    lifespan=lifespan,
)

origins = allowed_origins()
logger.debug("Allowed origins: %s", origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvariantViolation)
async def invariant_violation_handler(request: Request, exc: InvariantViolation):
    # An engine bug, not something the client did
    logger.error("Invariant violation on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": {"reason": "internal_error", "message": str(exc)}})


app.include_router(games.router, prefix="/api")


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
