"""
FastAPI Application Entry Point

This module creates and configures the FastAPI application for the
Face-Verified Authentication API.

The application provides:
- REST endpoints for registration, login, face verification and identity
- Health check endpoint
- Mapping of core domain errors to HTTP responses

Usage:
    # From project root:
    uvicorn api.app:app --host 0.0.0.0 --port 8000 --reload

    # Or run directly:
    python -m api.app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.dependencies import get_auth_core, reset_auth_core
from api.routes import authentication_router
from api.schemas import HealthResponse
from core.auth_core import AuthCore
from core.config import get_logging_config, get_server_config, get_environment
from core.errors import (
    AuthError,
    ConflictError,
    DataIntegrityError,
    InternalError,
    InvalidInputError,
    UnauthorizedError,
)


API_VERSION = "0.1.0"

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Configure logging
logging.basicConfig(level=logging.INFO, format=DEFAULT_LOG_FORMAT)
logger = logging.getLogger(__name__)

# Checked in order; subclasses inherit their parent's status
ERROR_STATUS_CODES = (
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (DataIntegrityError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (InternalError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: AuthError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def configure_logging(logging_config: dict) -> None:
    """Apply the level and format from the "logging" config section to the root logger."""
    root = logging.getLogger()
    root.setLevel(logging_config.get("level", "INFO"))

    formatter = logging.Formatter(logging_config.get("format", DEFAULT_LOG_FORMAT))
    for handler in root.handlers:
        handler.setFormatter(formatter)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup:
    - Apply logging level and format from config
    - Build the AuthCore (fails fast on unusable configuration)

    Runs on shutdown:
    - Close the user directory
    """
    configure_logging(get_logging_config())

    logger.info("=" * 60)
    logger.info(f"Starting Face-Verified Authentication API ({get_environment()})")
    logger.info("=" * 60)

    auth = get_auth_core()
    logger.info(f"User directory ready: {auth.directory.count_users()} users registered")
    logger.info(f"Face match threshold: {auth.matcher.threshold}")

    yield

    logger.info("Shutting down API...")
    reset_auth_core()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Face-Verified Authentication API",
    description="""
Password authentication with biometric re-verification.

## Features
- **Register**: Create an account with a password and a face embedding
- **Login**: Exchange email and password for a bearer token
- **Face verify**: Compare a fresh face embedding with the enrolled one
- **Me**: Echo the identity carried by a bearer token
    """,
    version=API_VERSION,
    lifespan=lifespan,
)

# Include routers
app.include_router(authentication_router)


# ============================================================
# Error Handlers
# ============================================================

@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    """Translate a domain error into a JSON error response."""
    status_code = status_for(exc)
    headers = None

    if status_code >= 500:
        logger.error(f"{exc.kind} error on {request.url.path}: {exc.message}")
        detail = "Internal server error"
    else:
        detail = exc.message

    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "error": exc.kind},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report unparseable request bodies as invalid input."""
    logger.debug(f"Request validation failed on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request body", "error": InvalidInputError.kind},
    )


# ============================================================
# Health Check Endpoint
# ============================================================

@app.get("/health", response_model=HealthResponse, tags=["system"])
def health_check(auth: AuthCore = Depends(get_auth_core)):
    """
    Check the health of the API and its user directory.
    """
    try:
        enrolled_users = auth.directory.count_users()
        health_status = "healthy"
    except Exception as e:
        logger.error(f"Health check could not reach the user directory: {e}")
        enrolled_users = 0
        health_status = "unhealthy"

    return HealthResponse(
        status=health_status,
        enrolled_users=enrolled_users,
        version=API_VERSION,
    )


@app.get("/", tags=["system"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Face-Verified Authentication API",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    server_config = get_server_config()
    host = server_config["host"]
    port = server_config["port"]

    logger.info(f"Starting server on {host}:{port}")
    uvicorn.run(
        "api.app:app",
        host=host,
        port=port,
        reload=True,
        log_level="info",
    )
