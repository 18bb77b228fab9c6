"""
FastAPI Application — Fault Scoring Service & Monitoring Session

Serves the scoring contract (/predict, /explain, /fault-location, /health)
and the dashboard's session endpoints (telemetry, real-time loop, history).

CORS: Configured via environment variables.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from windsight.config import settings
from windsight.telemetry import InvalidRecord
from .monitor_routes import router as monitor_router
from .routes import router
from .state import build_session


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info(f"🚀 Starting {settings.PROJECT_NAME}")
    logger.info(f"📍 Running in {settings.ENVIRONMENT} mode")
    logger.info(f"🔗 Remote scoring: {settings.REMOTE_SCORING_URL or 'disabled'}")
    yield
    # Shutdown
    await app.state.session.close()
    logger.info(f"👋 Shutting down {settings.PROJECT_NAME}")


# Application metadata
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Wind turbine fault scoring with feature attribution",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Session is built eagerly so it exists with or without lifespan events
app.state.session = build_session(settings)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(InvalidRecord)
async def invalid_record_handler(request: Request, exc: InvalidRecord):
    """Scoring failures from incomplete records surface as 422."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc), "fields": exc.fields},
    )


# Include API routes
app.include_router(router, tags=["Scoring"])
app.include_router(monitor_router)


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint, points at the docs."""
    return {
        "message": "WindSight Fault Scoring API",
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/ping", tags=["Health"])
async def ping():
    """Lightweight heartbeat. No scoring, no remote calls."""
    return {"status": "ok"}
