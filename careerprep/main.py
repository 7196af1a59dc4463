from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from careerprep.routers import analysis, interviews, swot
from careerprep.models.settings import get_settings
from careerprep.utils.logging_config import configure_for_environment, get_logger
from careerprep.middleware.error_handlers import (
    ExceptionHandlerMiddleware,
    RequestLoggingMiddleware,
    PerformanceMiddleware,
    HealthCheckMiddleware
)

# Configure logging first
configure_for_environment()
logger = get_logger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager"""
    logger.info("Career Prep API starting up...")

    try:
        from careerprep.services.db import init_indexes
        await init_indexes()
        logger.info("Database indexes initialized successfully")
    except Exception as e:
        logger.warning(f"Database index initialization had issues: {e}")
        logger.info("Application will continue - some operations may be slower without indexes")

    logger.info("Career Prep API startup completed")

    yield

    logger.info("Career Prep API shutting down...")


app = FastAPI(title="Career Prep API", version=VERSION, lifespan=lifespan)

# Middleware runs LIFO: the last added is the outermost
app.add_middleware(ExceptionHandlerMiddleware)
app.add_middleware(PerformanceMiddleware, slow_request_threshold=get_settings().slow_request_threshold)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(HealthCheckMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
@app.head("/")
async def root():
    """Root endpoint - handles both GET and HEAD requests for health checks"""
    logger.debug("Root endpoint accessed")
    return {"message": "Welcome to the Career Prep API", "version": VERSION, "status": "ok"}


@app.get("/health")
@app.head("/health")
async def health_check():
    """Health check endpoint - handles both GET and HEAD requests"""
    return {
        "status": "healthy",
        "environment": get_settings().environment,
        "timestamp": datetime.utcnow().isoformat(),
    }


app.include_router(analysis.router, prefix="/api/analysis", tags=["analysis"])
app.include_router(interviews.router, prefix="/api/interviews", tags=["interviews"])
app.include_router(swot.router, prefix="/api/swot", tags=["swot"])

logger.info("Career Prep API initialized successfully")
