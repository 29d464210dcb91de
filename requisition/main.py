# requisition/main.py
"""
FastAPI application entry point.
Builds the database engine and mail notifier at startup, maps domain errors
to JSON responses, and mounts all routers under the API prefix.
"""

import time
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from requisition.config import settings
from requisition.database import create_db_engine, create_session_factory, create_tables
from requisition.exceptions import RequisitionError
from requisition.limiter import limiter
from requisition.middleware import SecureHeadersMiddleware
from requisition.routers import auth, health, requests, vehicles
from requisition.services.notification_service import Notifier
from requisition.utils.logger import get_logger

logger = get_logger(__name__)


# ── Lifecycle ────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚗 Vehicle Requisition backend starting up...")
    engine = create_db_engine(settings.DATABASE_URL)
    create_tables(engine)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.notifier = Notifier(settings)
    logger.info("✅ Database tables ready")
    logger.info(f"📧 Email notifications {'enabled' if settings.email_enabled else 'disabled'}")
    logger.info(f"📍 Environment: {settings.ENVIRONMENT}")

    yield

    logger.info("🛑 Vehicle Requisition backend shutting down...")
    app.state.notifier.shutdown(wait=True)
    engine.dispose()


app = FastAPI(
    title="Vehicle Requisition Management API",
    description="Employees request trips, admins approve or reject and assign vehicles.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── CORS (SPA front end) ─────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Rate limiting and security headers ───────────────────────────────────
# Last added runs first: headers are set on 429 responses too
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecureHeadersMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
def _error_body(message: str, **extra) -> dict:
    body = {"error": True, "message": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


@app.exception_handler(RequisitionError)
async def requisition_error_handler(request: Request, exc: RequisitionError):
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code} on {request.url.path}: {exc.message}", exc_info=exc.__cause__)
        message = "Internal server error" if settings.is_production else exc.message
    else:
        logger.warning(f"{exc.error_code} on {request.url.path}: {exc.message}")
        message = exc.message
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message, code=exc.error_code, errors=exc.details),
    )


def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"[RATE] {request.client.host if request.client else 'unknown'} exceeded {exc.detail} on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=_error_body("Too many requests, please try again later.", code="RATE_LIMITED"),
    )


app.add_exception_handler(RateLimitExceeded, rate_limit_handler)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": str(err["loc"][-1]) if err["loc"] else "unknown", "msg": err["msg"]}
        for err in exc.errors()
    ]
    logger.warning(f"Validation errors on {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Validation errors", code="VALIDATION_ERROR", errors=errors),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = "API endpoint not found"
    else:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(status_code=exc.status_code, content=_error_body(message))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    stack = None if settings.is_production else "".join(
        traceback.format_exception(type(exc), exc, exc.__traceback__)
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", stack=stack),
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(auth.router,     prefix=settings.API_PREFIX, tags=["🔑 Auth"])
app.include_router(requests.router, prefix=settings.API_PREFIX, tags=["📝 Requests"])
app.include_router(vehicles.router, prefix=settings.API_PREFIX, tags=["🚗 Vehicles"])
app.include_router(health.router,   prefix=settings.API_PREFIX, tags=["💚 Health"])
