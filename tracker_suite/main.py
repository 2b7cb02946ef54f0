"""
Tracker Suite API - Main Application

SECURITY FEATURES:
- Conditional API docs (disabled in production by default)
- Structured logging without sensitive data
- RFC 7807 error responses that hide internals outside DEBUG
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from tracker_suite.api.router import api_router
from tracker_suite.config import settings
from tracker_suite.database import init_db
from tracker_suite.exceptions import register_exception_handlers
from tracker_suite.middleware import CorrelationIdMiddleware, CorrelationLogFilter
from tracker_suite.tasks.trial_monitor import start_trial_monitor, stop_trial_monitor
# Import all models to register them with SQLAlchemy metadata before init_db()
from tracker_suite.models import (  # noqa: F401
    User, Client, FollowUp, Interaction, AdminNotification,
    UserJourneyMilestone, UserJourneyProgress,
)

VERSION = "1.0.0"

# Configure secure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
for _handler in logging.getLogger().handlers:
    _handler.addFilter(CorrelationLogFilter())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting Tracker Suite API...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        # SECURITY: Don't log full exception details which may contain credentials
        logger.error(f"Database initialization failed: {type(e).__name__}")
        logger.warning("App starting without database - some features may not work")

    if settings.TRIAL_MONITOR_ENABLED:
        start_trial_monitor()
    yield
    # Shutdown
    stop_trial_monitor()
    logger.info("Shutting down Tracker Suite API...")


# SECURITY: Conditionally enable docs based on settings
docs_url = "/docs" if settings.DOCS_ENABLED else None
redoc_url = "/redoc" if settings.DOCS_ENABLED else None

app = FastAPI(
    title="Tracker Suite API",
    description="Client relationship management: clients, follow-ups, interactions and user journeys",
    version=VERSION,
    docs_url=docs_url,
    redoc_url=redoc_url,
    lifespan=lifespan,
)

register_exception_handlers(app)

# CORS middleware
# SECURITY: Restrict origins to known frontend URLs
allowed_origins = [settings.FRONTEND_URL]
if not settings.is_production:
    allowed_origins.extend([
        "http://localhost:5173",  # Vite dev server
        "http://localhost:3000",  # Alternative dev port
    ])

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[
        "X-Correlation-ID",
        "X-Request-ID",
        "X-Trial-Status",
        "X-Trial-Days-Remaining",
        "X-Trial-Valid",
    ],
)
app.add_middleware(CorrelationIdMiddleware)

# Include routers
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint - API info."""
    response = {
        "name": "Tracker Suite API",
        "version": VERSION,
        "health": "/health",
    }
    if settings.DOCS_ENABLED:
        response["docs"] = "/docs"
    return response


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": VERSION,
        "environment": settings.ENVIRONMENT,
    }


# For running with uvicorn directly (development only)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tracker_suite.main:app",
        host="0.0.0.0",
        port=5001,
        reload=settings.DEBUG,
    )
