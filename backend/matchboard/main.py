"""
backend/matchboard/main.py

Purpose:
    FastAPI application bootstrap: middleware/router wiring, match store
    startup sync and static serving of logos and the public site.

Dependencies:
    - matchboard.database
    - matchboard.services.match_store
    - matchboard.providers.gemini
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

import matchboard.database as _db
from matchboard.config import settings
from matchboard.database import close_db, connect_db
from matchboard.middleware.api_secret import ApiSecretMiddleware
from matchboard.middleware.logging import StructuredLoggingMiddleware, setup_logging

logger = logging.getLogger("matchboard")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await connect_db()
    from matchboard.services.match_store import match_store

    await match_store.bootstrap()
    logger.info("Match store ready: %d matches", len(match_store.matches))

    yield

    from matchboard.providers.gemini import gemini_provider

    await gemini_provider.aclose()
    await close_db()


app = FastAPI(
    title="Matchboard",
    description="Football fixtures and results with logo lookup",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(ApiSecretMiddleware, prefix="/api")
app.add_middleware(StructuredLoggingMiddleware)

# Routers
from matchboard.routers.matches import router as matches_router
from matchboard.routers.agent import router as agent_router

app.include_router(matches_router)
app.include_router(agent_router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Return clean validation errors without leaking internal field paths."""
    errors = []
    for err in exc.errors():
        loc = err.get("loc", ())
        field = ".".join(str(l) for l in loc[1:]) if len(loc) > 1 else str(loc[-1]) if loc else "unknown"
        errors.append({"field": field, "message": err.get("msg", "Invalid value.")})
    return JSONResponse(status_code=422, content={"detail": "Validation error.", "errors": errors})


@app.exception_handler(ServerSelectionTimeoutError)
async def db_timeout_handler(request: Request, exc: ServerSelectionTimeoutError):
    logger.error("Database timeout: %s %s", request.method, request.url.path)
    return JSONResponse(status_code=503, content={"detail": "Service temporarily unavailable."})


@app.exception_handler(ConnectionFailure)
async def db_connection_handler(request: Request, exc: ConnectionFailure):
    logger.error("Database connection failure: %s %s", request.method, request.url.path)
    return JSONResponse(status_code=503, content={"detail": "Service temporarily unavailable."})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all: log the real error, return a safe generic message."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "An internal error occurred."})


@app.get("/health")
async def health():
    """Health check -- reports the mirror state and match count."""
    from matchboard.services.match_store import match_store

    mirror = "disabled"
    if _db.db is not None:
        try:
            result = await _db.db.command("ping")
            mirror = "connected" if result.get("ok") == 1.0 else "degraded"
        except Exception:
            mirror = "disconnected"

    return {
        "status": "healthy" if mirror != "disconnected" else "degraded",
        "mongo": mirror,
        "matches": len(match_store.matches),
        "logo_root": os.path.isdir(settings.LOGO_ROOT),
    }


# Static assets last so API routes win.
if os.path.isdir(settings.LOGO_ROOT):
    app.mount("/" + settings.LOGO_URL_PREFIX.strip("/"), StaticFiles(directory=settings.LOGO_ROOT), name="logo")
if os.path.isdir(settings.PUBLIC_DIR):
    app.mount("/", StaticFiles(directory=settings.PUBLIC_DIR, html=True), name="public")
