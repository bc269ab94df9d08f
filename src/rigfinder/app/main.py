"""FastAPI application entry point for the rigfinder API."""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rigfinder.app.config import get_settings
from rigfinder.domain.errors import RigfinderError
from rigfinder.domain.schemas import HealthResponse
from rigfinder.infra.database import init_db
from rigfinder.services.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

_HTTP_ERROR_CODES = {
    400: "INVALID_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    429: "RATE_LIMITED",
}


async def rate_limit_prune_loop(limiter: FixedWindowRateLimiter, interval_seconds: float):
    """Drop expired rate-limit windows so idle clients don't accumulate."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            dropped = limiter.prune()
            if dropped:
                logger.debug("Rate limiter: pruned %d expired windows", dropped)
        except Exception as e:
            logger.error("Rate limiter prune error: %s", e)


def create_rate_limiter() -> FixedWindowRateLimiter:
    settings = get_settings()
    return FixedWindowRateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: initialize database and the rate limiter."""
    await init_db()

    limiter = app.state.rate_limiter
    prune_task = asyncio.create_task(
        rate_limit_prune_loop(limiter, get_settings().rate_limit_window_seconds)
    )
    yield

    prune_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await prune_task
    limiter.clear()


settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.debug else logging.WARNING,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

app = FastAPI(
    title="rigfinder API",
    lifespan=lifespan,
    debug=settings.debug,
)
app.state.rate_limiter = create_rate_limiter()

_cors_origins = settings.cors_origins_list
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=("*" not in _cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error envelope: {"error": {"message": ..., "code": ...}}
# ---------------------------------------------------------------------------


def error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"message": message, "code": code}},
    )


@app.exception_handler(RigfinderError)
async def rigfinder_error_handler(request: Request, exc: RigfinderError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message, exc.code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return error_response(422, message, "VALIDATION_ERROR")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    code = _HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return error_response(exc.status_code, str(exc.detail), code)


# ---------------------------------------------------------------------------
# Route includes
# ---------------------------------------------------------------------------
from rigfinder.app.routes.auth import router as auth_router
from rigfinder.app.routes.contact_events import router as contact_events_router
from rigfinder.app.routes.search import router as search_router
from rigfinder.app.routes.equipment import router as equipment_router
from rigfinder.app.routes.leads import router as leads_router
from rigfinder.app.routes.vendors import router as vendors_router
from rigfinder.app.routes.admin import router as admin_router

app.include_router(auth_router)
app.include_router(contact_events_router)
app.include_router(search_router)
app.include_router(equipment_router)
app.include_router(leads_router)
app.include_router(vendors_router)
app.include_router(admin_router)


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Return service health status."""
    return {"status": "ok", "service": "rigfinder"}


def run() -> None:
    """Run the application with uvicorn (used by project.scripts entry point)."""
    uvicorn.run(
        "rigfinder.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
