"""
api/main.py -- FastAPI application entry point for the Mitfahrbörse.

Run with:  uvicorn api.main:app --reload
           python main.py --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware -- adds CORS headers for allowed browser origins
  2. log_requests   -- one log line per request with status and latency

Lifespan handles startup (engine, stores, session table, gate, optional sweep
task) and shutdown (cancel sweep task, dispose engine) symmetrically. The
session table starts empty and is discarded on shutdown; sessions never
survive a restart.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.entries import router as entries_router
from auth.gate import AuthGate
from auth.sessions import SessionTable
from auth.store import CredentialStore
from board.store import EntryStore
from core.config import get_settings
from core.database import create_db_engine
from core.errors import BoardError, Unauthorized

__version__ = "0.1.0"

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("mitfahrboerse.api")

# ---------------------------------------------------------------------------
# Background sweep task
# ---------------------------------------------------------------------------


async def _sweep_loop(app: FastAPI, interval: int) -> None:
    """Evict idle sessions every `interval` seconds.

    Started only when SESSION_SWEEP_SECONDS > 0. Expiry stays lazy for
    callers; this only bounds memory held by tokens that never come back.
    CancelledError from task.cancel() during shutdown propagates out of
    asyncio.sleep and unwinds the coroutine.
    """
    while True:
        await asyncio.sleep(interval)
        removed = await app.state.sessions.sweep_expired()
        if removed:
            logger.info("Session sweep removed %d idle session(s)", removed)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the shared components once and hang them on app.state.

    Startup order matters:
      1. Engine first -- both stores share its pool.
      2. Credential store before entry store -- the contact join reads the
         schueler table the credential store creates.
      3. Session table and gate -- the gate needs both the table and the
         credential store.
      4. Sweep task last -- references app.state.sessions.
    """
    settings = get_settings()
    logger.info("Mitfahrbörse API starting up")
    engine = create_db_engine(settings.database_url, settings.db_pool_size, settings.db_pool_timeout)
    app.state.settings = settings
    app.state.engine = engine
    app.state.credentials = CredentialStore(engine)
    app.state.entries = EntryStore(engine)
    logger.info("Stores initialized (pool_size=%d)", settings.db_pool_size)
    app.state.sessions = SessionTable(
        idle_limit=settings.session_idle_seconds,
        shards=settings.session_shards,
    )
    app.state.gate = AuthGate(app.state.sessions, app.state.credentials)
    logger.info(
        "Session table initialized (idle_limit=%ds, shards=%d)",
        settings.session_idle_seconds,
        settings.session_shards,
    )
    app.state.sweep_task = None
    if settings.session_sweep_seconds:
        app.state.sweep_task = asyncio.create_task(_sweep_loop(app, settings.session_sweep_seconds))

    yield

    if app.state.sweep_task is not None:
        app.state.sweep_task.cancel()
    engine.dispose()
    logger.info("Mitfahrbörse API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Mitfahrbörse API",
    description="Offers and requests for shared rides, gated by per-user tokens and idle-limited sessions.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])
app.include_router(entries_router, tags=["Entries"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(),
    )


@app.exception_handler(BoardError)
async def board_error_handler(request: Request, exc: BoardError) -> JSONResponse:
    """Map the domain taxonomy (Unauthorized, Rejected, NotFound, Upstream) to HTTP."""
    response = _error_response(exc.status_code, exc.code, exc.message, exc.detail)
    if isinstance(exc, Unauthorized):
        response.headers["WWW-Authenticate"] = "Bearer"
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when the request body or path params are malformed."""
    return _error_response(422, "validation_error", "Request validation failed.", str(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Structured envelope for routing errors (unknown path, wrong method)."""
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
#
# No authentication -- load balancers and monitoring must reach it.
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
async def health(request: Request) -> HealthResponse:
    """Return liveness, version, and the number of sessions currently held."""
    return HealthResponse(version=__version__, sessions=len(request.app.state.sessions))
