"""
FastAPI application for Local Gov Watch API.

Provides calendar export, source runs, and ingestion status endpoints.

Responsibility: Main API application setup and configuration
"""

# Load .env BEFORE importing settings (critical for pydantic-settings)
from dotenv import load_dotenv
load_dotenv('.env')

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from govwatch import __version__
from govwatch.config import settings
from govwatch.db.session import db
from api.middleware import GuestRateLimiterMiddleware

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.app.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=f"{settings.app.app_name} API",
    description="Civic data API for local legislation, meetings, and elections",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

logger.info(f"CORS Origins configured: {settings.app.cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.app.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Retry-After", "Content-Disposition"],
    max_age=3600,
)

# Guest calendar rate limiting
app.add_middleware(
    GuestRateLimiterMiddleware,
    limit=settings.app.guest_requests_per_minute,
    redis_url=settings.app.redis_url
)


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup"""
    logger.info(f"Starting {settings.app.app_name} API...")
    logger.info(f"Environment: {settings.app.environment}")
    logger.info(f"Debug mode: {settings.app.debug}")
    logger.info(f"Guest calendar limit: {settings.app.guest_requests_per_minute}/minute")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info(f"Shutting down {settings.app.app_name} API...")
    await db.close()


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": f"{settings.app.app_name} API",
        "version": __version__,
        "status": "operational",
        "endpoints": {
            "calendar": "/api/v1/calendar",
            "sources": "/api/v1/sources",
            "status": "/api/v1/status",
            "docs": "/docs"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": "localgov-watch-api"
    }


# Exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.app.debug else "An unexpected error occurred"
        }
    )


# Import and include routers
from api.v1.endpoints import calendar, sources, status

app.include_router(
    calendar.router,
    prefix="/api/v1",
    tags=["calendar"]
)

app.include_router(
    sources.router,
    prefix="/api/v1",
    tags=["sources"]
)

app.include_router(
    status.router,
    prefix="/api/v1",
    tags=["status"]
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=settings.app.api_host,
        port=settings.app.api_port,
        reload=settings.app.debug
    )
