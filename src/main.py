"""
TeamCollab Backend - Main Application Entry Point

FastAPI application serving attendance, the Slack command endpoint and the
GitHub relay webhook.
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from .database import init_database, close_database, get_database
from .middleware.slowapi_limiter import setup_rate_limiting
from .monitoring import metrics_middleware, update_db_pool_metrics
from .services.exceptions import AttendanceError
from .web.routes import router as attendance_router
from .web.slack_routes import router as slack_router
from .web.webhook_routes import router as webhook_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown."""
    logger.info(f"Starting {settings.app_name} ({settings.environment})...")

    try:
        if await init_database():
            logger.info("PostgreSQL database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")

    yield

    logger.info("Shutting down...")
    try:
        await close_database()
    except Exception as e:
        logger.warning(f"Failed to close database during shutdown: {e}")

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Team collaboration backend: attendance, Slack commands and GitHub relay",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(metrics_middleware)
setup_rate_limiting(app)

app.include_router(attendance_router)
app.include_router(slack_router)
app.include_router(webhook_router)


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": "1.0.0"
    }


@app.get("/health")
async def health_check():
    """Liveness check."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "environment": settings.environment,
    }


@app.get("/health/db")
async def db_health():
    """Database connectivity and connection pool status."""
    db = get_database()
    health = await db.health_check()
    pool_status = health.get("pool") or {}
    update_db_pool_metrics(pool_status)

    status_code = 200 if health.get("status") == "healthy" else 503
    return JSONResponse(
        status_code=status_code,
        content={**health, "timestamp": datetime.now().isoformat()},
    )


@app.get("/metrics")
async def metrics():
    """Prometheus exposition."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


# Error handlers
@app.exception_handler(AttendanceError)
async def attendance_exception_handler(request: Request, exc: AttendanceError):
    """Attendance errors become {"message"} with the error's status."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = errors[0].get("msg") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"message": detail})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
