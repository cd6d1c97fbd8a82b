"""
api/main.py -- FastAPI application entry point for the admin takeover lab.

Run with:      python main.py
               uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. log_requests      -- one log line per request with status and latency
  2. SessionMiddleware -- signed-cookie session backing request.session

Lifespan handles startup (stores, auth service, OTP purge task) and
shutdown (cancel purge task, close DB connections) symmetrically.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from api.models import ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.otp import router as otp_router
from api.routes.users import router as users_router
from auth.errors import AuthError
from auth.service import AuthService
from auth.store import OtpStore, UserStore
from core.config import get_settings

VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("takeoverlab.api")

_settings = get_settings()

# ---------------------------------------------------------------------------
# Background purge task
# ---------------------------------------------------------------------------


async def _purge_loop(app: FastAPI, interval: float) -> None:
    """Physically delete expired OTP rows every `interval` seconds.

    Reads already ignore expired rows; this keeps the table from growing.
    CancelledError from task.cancel() during shutdown propagates out of
    asyncio.sleep and unwinds the coroutine.
    """
    while True:
        await asyncio.sleep(interval)
        try:
            removed = app.state.otp_store.purge_expired()
        except AuthError as exc:
            logger.error("OTP purge failed: %s", exc.message)
            continue
        if removed:
            logger.info("Purged %d expired OTP record(s)", removed)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create stores and the auth service; tear them down on shutdown.

    The purge task is started last because it references app.state.otp_store.
    """
    logger.info("Admin takeover lab starting up")
    app.state.user_store = UserStore(_settings.database_url)
    app.state.otp_store = OtpStore(_settings.database_url, ttl=_settings.otp_ttl_seconds)
    app.state.auth_service = AuthService(app.state.user_store, app.state.otp_store)
    logger.info("Stores initialized (otp_ttl=%ds)", _settings.otp_ttl_seconds)
    app.state.purge_task = asyncio.create_task(_purge_loop(app, _settings.otp_purge_interval_seconds))

    yield

    app.state.purge_task.cancel()
    app.state.otp_store.close()
    app.state.user_store.close()
    logger.info("Admin takeover lab shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="TechIndustries Admin API",
    description="Internal Admin API for TechIndustries",
    version=VERSION,
    lifespan=lifespan,
    # The lab publishes its API docs at an "internal" path, unauthenticated.
    docs_url="/internal/swagger/index.html",
    openapi_url="/api/swagger.json",
    redoc_url=None,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

# Plain-HTTP cookie (https_only=False); the session lives as long as the browser
# keeps the cookie. No CSRF token is layered on top.
app.add_middleware(
    SessionMiddleware,
    secret_key=_settings.session_secret,
    session_cookie=_settings.session_cookie,
    https_only=False,
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

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(users_router, prefix="/api", tags=["Users (admin)"])
app.include_router(otp_router, tags=["OTP diagnostics"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# Every handler returns the same {"error": message} envelope.
# ---------------------------------------------------------------------------


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Map the auth error taxonomy onto HTTP statuses.

    StoreError carries the raw driver message and answers 500; the rest are
    400/401/403/404 with their fixed messages.
    """
    if exc.status_code >= 500:
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 when the request body or path params fail validation."""
    return JSONResponse(
        status_code=422,
        content={"error": "Request validation failed.", "detail": str(exc.errors())},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected server errors; the traceback goes to the log only."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="An unexpected error occurred.").model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return liveness and current version."""
    return HealthResponse(version=VERSION)
