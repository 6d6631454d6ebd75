"""
FastAPI application with database pool lifecycle management.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from engagement.config import settings
from engagement.db.pool import db_health_check, db_pool
from engagement.features.client_engagement.api.router import router as engagement_router
from engagement.infrastructure.observability.logging import get_logger, setup_logging

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the record store pool on startup and close it on shutdown."""
    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    if settings.DATABASE_URL:
        await db_pool.initialize()
    else:
        logger.warning("DATABASE_URL not configured; record store unavailable")

    yield

    logger.info("Application shutting down")
    try:
        await db_pool.close()
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))


app = FastAPI(
    title="Client Engagement Engine",
    description="Batch engagement scoring, churn risk and fleet reporting",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(engagement_router)


@app.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "engagement-engine"}


@app.get("/readyz")
async def readyz():
    """Readiness check including the database pool."""
    db_health = await db_health_check()
    return {"overall_ok": bool(db_health.get("healthy")), "checks": {"database": db_health}}


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


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
