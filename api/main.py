"""
api/main.py -- FastAPI application entry point for the account service.

Run with:  uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. log_requests          -- one log line per request with latency

Lifespan opens the document store on startup and closes it on shutdown.

Every error leaves the server in the same ErrorResponse envelope. Auth and
store failures are logged here with full detail; the client only ever sees a
generic code and message for the status.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.accounts import router as accounts_router
from api.routes.login import router as login_router
from auth.errors import AuthError, DBError
from auth.store import UserStore
from core.config import get_settings
from docstore.errors import StoreError
from docstore.store import DocumentStore

VERSION = "0.1.0"

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("accountsvc.api")

# Generic client-facing messages per status. Auth failures of different kinds
# share a status and therefore a body.
_PUBLIC_ERRORS: dict[int, tuple[str, str]] = {
    400: ("bad_request", "The request could not be processed."),
    401: ("unauthorized", "Authentication required."),
    404: ("not_found", "Resource was not found."),
    500: ("internal_error", "An unexpected error occurred."),
    503: ("service_unavailable", "The service is temporarily unavailable."),
}

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the user store on startup, close it on shutdown."""
    logger.info("Account service starting up")
    app.state.user_store = UserStore(DocumentStore(_settings.database_url))
    logger.info("Document store initialized")

    yield

    app.state.user_store.close()
    logger.info("Account service shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Account Service",
    description="Signup, password login, and session-token authenticated account lookup.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=_settings.allowed_hosts)


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

app.include_router(accounts_router, tags=["Accounts"])
app.include_router(login_router, tags=["Login"])


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


def _public_error(status_code: int) -> JSONResponse:
    code, message = _PUBLIC_ERRORS.get(status_code, (f"http_{status_code}", "Request failed."))
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message)).model_dump(),
    )


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Convert an authentication failure to its status with a generic body.

    The typed error (attempted username, store cause) is logged server-side
    only. NoUser and WrongPassword are indistinguishable to the client.
    """
    if isinstance(exc, DBError):
        logger.error("Authentication on %s failed in the store: %s", request.url.path, exc)
    elif exc.status_code >= 500:
        logger.error("Authentication on %s failed: %s", request.url.path, exc)
    else:
        logger.info("Authentication on %s rejected (%s): %s", request.url.path, exc.kind, exc)
    return _public_error(exc.status_code)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    """Answer a store failure outside authentication with 503 or 500."""
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return _public_error(exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or query params fail validation.

    The offending input is dropped from each error; request bodies carry
    passwords.
    """
    errors = [{k: v for k, v in err.items() if k != "input"} for err in exc.errors()]
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(errors),
            )
        ).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Registered against Starlette's base class so router-level 404 and 405
    responses get the same envelope as errors raised by route handlers.
    Route handlers raise HTTPException with detail={"code", "message"}.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)
    if exc.status_code in _PUBLIC_ERRORS:
        return _public_error(exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(code=f"http_{exc.status_code}", message=str(exc.detail)),
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is logged, never returned in the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _public_error(500)


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness, version, and document store reachability."""
    store = getattr(request.app.state, "user_store", None)
    database = "ok" if store is not None and store.ping() else "error"
    return HealthResponse(version=VERSION, components={"app": "ok", "database": database})
