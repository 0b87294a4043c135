from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import time
import uuid
import logging
from typing import List
from contextlib import asynccontextmanager

from motour.core.config import settings
from motour.core.database import engine
from motour.core.database import Base
from motour.api import health, auth, destinations, saved_destinations, profile, vehicles, uploads
from motour.api.admin import auth as admin_auth
from motour.api.admin import users as admin_users
from motour.api.admin import destinations as admin_destinations
from motour.api.admin import ratings as admin_ratings
from motour.api.admin import metrics as admin_metrics
from motour.api.admin import uploads as admin_uploads
from motour.services.media import MediaUploadError

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting Motour API")

    # Create database tables
    Base.metadata.create_all(bind=engine)

    yield

    # Shutdown
    logger.info("Shutting down Motour API")


# Create FastAPI app
app = FastAPI(
    title="Motour API",
    description="Destinations, ratings, saved places, vehicles and admin dashboard",
    version="1.0.0",
    lifespan=lifespan
)

# Security headers middleware
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """Add security headers to all responses."""
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    return response


# Logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing."""
    start_time = time.time()

    logger.info(
        "Request started",
        extra={
            "request_id": getattr(request.state, "request_id", "unknown"),
            "method": request.method,
            "url": str(request.url),
            "client_ip": request.client.host if request.client else "unknown"
        }
    )

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "Request completed",
        extra={
            "request_id": getattr(request.state, "request_id", "unknown"),
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2)
        }
    )

    return response


# Request ID middleware (registered last so it runs first)
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add unique request ID for tracing."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response


# CORS middleware - the admin dashboard sends the adminToken cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def add_trusted_hosts(app: FastAPI, hosts: List[str]) -> None:
    """Reject requests whose Host header is not listed; an empty list leaves Host unchecked."""
    if hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=hosts)


# Trusted host middleware, driven by TRUSTED_HOSTS
add_trusted_hosts(app, settings.trusted_hosts)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


# Exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with consistent format."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "status_code": exc.status_code,
            "request_id": _request_id(request)
        },
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Reject invalid input listing every violated field."""
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part not in ("body", "query", "path")),
            "message": error["msg"]
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation failed",
            "errors": errors,
            "status_code": 400,
            "request_id": _request_id(request)
        }
    )


@app.exception_handler(MediaUploadError)
async def media_upload_exception_handler(request: Request, exc: MediaUploadError):
    """Media host failures surface as a bad gateway."""
    logger.error(
        f"Media upload failed: {exc}",
        extra={"request_id": _request_id(request)}
    )
    return JSONResponse(
        status_code=502,
        content={
            "error": "Failed to upload media",
            "status_code": 502,
            "request_id": _request_id(request)
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "request_id": _request_id(request),
            "exception_type": type(exc).__name__
        },
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "status_code": 500,
            "request_id": _request_id(request)
        }
    )


# Public and user routers
app.include_router(health.router, tags=["health"])
app.include_router(auth.router)
app.include_router(destinations.router)
app.include_router(saved_destinations.router)
app.include_router(profile.router)
app.include_router(vehicles.router)
app.include_router(uploads.router)

# Admin routers
app.include_router(admin_auth.router)
app.include_router(admin_users.router)
app.include_router(admin_destinations.router)
app.include_router(admin_ratings.router)
app.include_router(admin_metrics.router)
app.include_router(admin_uploads.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Motour API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "motour.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True if settings.environment == "development" else False,
        log_level="info"
    )
