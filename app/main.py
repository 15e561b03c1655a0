from contextlib import asynccontextmanager
from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.error_handler import setup_error_handlers
from app.core.logging import RequestLoggingMiddleware, setup_logging
from app.core.middleware import RequestSizeMiddleware, SecurityHeadersMiddleware
from app.db.database import dispose_db, init_db
from app import models  # noqa: F401  registers tables on Base.metadata
import logging

if not settings.TESTING:
    setup_logging()
logger = logging.getLogger("api.request")

class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    environment: str
    vision_configured: bool

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handle startup and shutdown events.
    """
    # Startup
    logger.info("Starting up application...")
    await init_db()

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await dispose_db()

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    Event Analyzer API - turns event flyers into structured, dated events.

    ## Features

    * 🖼️ **Flyer analysis**
        * Vision model extraction of title, date, time, place and price
        * Recurring date patterns recognized by the model, expanded by the server

    * 📅 **Events**
        * Single, multi-day and recurring events
        * Past events hidden from listings (America/Guatemala calendar)

    ## Error Handling

    Errors share one body shape: `success`, `detail`, `status_code`, `type`.
    * 400: Bad Request - Invalid input
    * 404: Not Found - Resource doesn't exist
    * 413: Request too large
    * 422: Unprocessable Entity - Schema validation failed
    * 502: Vision model call failed
    * 503: Vision model not configured
    """,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs" if settings.SHOW_DOCS else None,
    redoc_url=f"{settings.API_V1_STR}/redoc" if settings.SHOW_DOCS else None,
    lifespan=lifespan
)

# Add CORS middleware
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Add security headers middleware
if settings.SECURITY_HEADERS:
    app.add_middleware(SecurityHeadersMiddleware)

# Reject oversized bodies before they are read
app.add_middleware(RequestSizeMiddleware)

app.add_middleware(RequestLoggingMiddleware)

setup_error_handlers(app)

# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    responses={
        200: {
            "description": "Service status",
            "content": {
                "application/json": {
                    "example": {
                        "status": "ok",
                        "service": "Event Analyzer",
                        "version": "1.0.0",
                        "environment": "development",
                        "vision_configured": True
                    }
                }
            }
        }
    }
)
async def health() -> HealthResponse:
    """Liveness probe."""
    return HealthResponse(
        status="ok",
        service=settings.PROJECT_NAME,
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        vision_configured=bool(settings.OPENAI_API_KEY)
    )
