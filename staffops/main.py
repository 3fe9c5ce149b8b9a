# staffops/main.py
"""
Application entrypoint with database pool lifecycle and daily CRM sync.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from staffops.config import settings
from staffops.db.pool import db_pool
from staffops.features.completeness.api.router import router as completeness_router
from staffops.features.dashboard.api.router import router as dashboard_router
from staffops.features.sync.api.router import router as sync_router
from staffops.features.sync.services.daily_sync_service import daily_sync_service
from staffops.infrastructure.observability.logging import get_logger, setup_logging
from staffops.middleware import RequestContextMiddleware
from staffops.routes import health

# Setup logging before creating the app
setup_logging(log_level=settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown with proper resource management."""

    logger.info(
        "Application starting",
        environment=settings.environment,
        debug=settings.debug,
        timezone=settings.TIMEZONE,
    )

    try:
        logger.info("Initializing database pool")
        await db_pool.initialize()
    except Exception as e:
        logger.error("Failed to initialize database pool", error=str(e))
        raise

    # Never blocks startup: the sync cascade runs as a background task
    if settings.DAILY_SYNC_ON_STARTUP:
        decision = await daily_sync_service.run_on_startup()
        logger.info("Daily sync startup check finished", decision=decision.value)
    else:
        logger.info("Daily sync on startup disabled", flag="DAILY_SYNC_ON_STARTUP")

    yield

    logger.info("Application shutting down")

    shutdown_errors = []

    # Cancel the cascade before its connections go away
    try:
        await daily_sync_service.shutdown()
    except Exception as e:
        logger.error("Error stopping daily sync", error=str(e))
        shutdown_errors.append(f"Daily sync: {e}")

    try:
        logger.info("Closing database pool")
        await db_pool.close()
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))
        shutdown_errors.append(f"Database: {e}")

    if shutdown_errors:
        logger.warning("Some services had shutdown errors", errors=shutdown_errors)
    else:
        logger.info("All services closed successfully")


app = FastAPI(
    title="Staffing Operations Core",
    description="Operations dashboard, daily CRM sync and client data completeness",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(dashboard_router)
app.include_router(sync_router)
app.include_router(completeness_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    logger.info(
        "HTTP request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
    )
    return response


# Added last so it wraps the timing middleware and its log line gets the request_id
app.add_middleware(RequestContextMiddleware)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
