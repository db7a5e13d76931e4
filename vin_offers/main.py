"""FastAPI app entry point for the VIN offers lookup."""

import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from vin_offers.api.deps import limiter
from vin_offers.api.routes import router
from vin_offers.config import get_settings, validate_settings
from vin_offers.core.errors import (
    AuthError,
    OfferLookupError,
    OffersNotFoundError,
    UpstreamError,
    VINValidationError,
)
from vin_offers.core.logging import (
    log_error,
    log_request,
    log_response,
    logger,
    setup_logging,
)

_PUBLIC_DIR = Path(__file__).resolve().parent.parent / "public"

# Validate settings on startup
try:
    validate_settings()
except ValueError as e:
    logger.error(f"Configuration error: {e}")
    raise

settings = get_settings()
setup_logging(settings.log_level)
logger.info(
    f"Offers table={settings.offer_table.table_id} usage_table={settings.usage_table_id}"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup / shutdown."""
    logger.info("Starting VIN offers API...")
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="VIN Offers API",
    description="Commercial offers by VIN for signed-in staff",
    version="1.0.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# -----------------------------------------------------------------------------
# Error responses
# -----------------------------------------------------------------------------


@app.exception_handler(VINValidationError)
async def vin_validation_handler(request: Request, exc: VINValidationError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(OffersNotFoundError)
async def not_found_handler(request: Request, exc: OffersNotFoundError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"vin": exc.vin, "found": False, "message": exc.message},
    )


@app.exception_handler(AuthError)
async def auth_handler(request: Request, exc: AuthError):
    logger.info(f"Rejected {request.url.path} status={exc.status_code} reason={exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(UpstreamError)
async def upstream_handler(request: Request, exc: UpstreamError):
    log_error("Upstream failure", exc.__cause__, path=request.url.path, detail=exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "detail": exc.detail},
    )


@app.exception_handler(OfferLookupError)
async def lookup_error_handler(request: Request, exc: OfferLookupError):
    log_error("Unhandled lookup error", exc, path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    log_request(request.method, request.url.path)

    response = await call_next(request)

    duration_ms = (time.time() - start) * 1000
    log_response(request.method, request.url.path, response.status_code, duration_ms)

    return response


# Routes
app.include_router(router, prefix="/api")


@app.get("/healthz", response_class=PlainTextResponse)
async def healthz():
    return "ok"


# Frontend, mounted last so it never shadows the API
if _PUBLIC_DIR.is_dir():
    app.mount("/", StaticFiles(directory=_PUBLIC_DIR, html=True), name="public")
