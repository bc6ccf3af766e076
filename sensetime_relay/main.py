"""
SenseTime Relay Application Entry Point

FastAPI application main entry, including router registration and application configuration.
"""

import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from sensetime_relay import __version__
from sensetime_relay.api import relay_router
from sensetime_relay.common.errors import AppError
from sensetime_relay.config import get_settings
from sensetime_relay.logging_config import setup_logging
from sensetime_relay.providers.factory import close_adaptors

logger = logging.getLogger(__name__)

# Initialize logging configuration
setup_logging()


# Application Lifecycle Management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application Lifecycle Management

    Release the cached adaptors (and their HTTP clients) on shutdown.
    """
    settings = get_settings()
    logger.info("Relaying to %s", settings.SENSETIME_BASE_URL)
    if not settings.SENSETIME_API_KEY:
        logger.warning("SENSETIME_API_KEY is not set, upstream calls will fail with invalid_auth")
    yield
    # Shutdown
    await close_adaptors()


# Create FastAPI application
settings = get_settings()

app = FastAPI(
    title=settings.APP_NAME,
    description="OpenAI-compatible relay for SenseTime chat completions and embeddings",
    version=__version__,
    lifespan=lifespan,
)


# Global Exception Handler
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """
    Handle application custom exceptions

    In production mode, error details are hidden to prevent information leakage.
    """
    settings = get_settings()
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(include_details=settings.DEBUG),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle uncaught exceptions

    Stack traces are logged but only returned to clients in debug mode.
    """
    settings = get_settings()
    logger.error(
        "Uncaught exception: %s\nPath: %s\nTraceback:\n%s",
        str(exc),
        request.url.path,
        traceback.format_exc(),
    )

    if settings.DEBUG:
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "message": str(exc),
                    "type": type(exc).__name__,
                    "code": "internal_error",
                    "traceback": traceback.format_exc().split("\n"),
                }
            },
        )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "message": "Internal server error",
                "type": "internal_error",
                "code": "internal_error",
            }
        },
    )


# Health Check Endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health Check

    Used for service liveness probe.
    """
    return {"status": "healthy"}


# Register Relay Router
app.include_router(relay_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "sensetime_relay.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
