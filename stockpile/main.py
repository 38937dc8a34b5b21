"""stockpile - disaster-preparedness food stock manager living in LINE."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from stockpile.core.config import settings
from stockpile.core.db_client import close_connection, init_db
from stockpile.core.logging import configure_logfire, instrument_fastapi
from stockpile.core.redis_client import redis_client
from stockpile.core.scheduler import EXPIRY_NOTIFICATIONS_JOB, start_scheduler, stop_scheduler
from stockpile.core.scheduler_tracker import job_tracker
from stockpile.interface.webhook import router as webhook_router
from stockpile.services.session_store import session_store


logger = logging.getLogger(__name__)

# Consecutive failures at which the scheduler is reported as critical
CRITICAL_CONSECUTIVE_FAILURES = 3


async def check_redis_connectivity() -> None:
    """Verify Redis connectivity (optional service).

    Logs a warning if Redis is configured but unreachable; sessions then
    degrade instead of failing startup.
    """
    if not redis_client.is_available:
        logger.info("startup_validation", extra={"service": "redis", "status": "disabled"})
        return

    if await redis_client.ping():
        logger.info("startup_validation", extra={"service": "redis", "status": "ok"})
    else:
        logger.warning("startup_validation", extra={"service": "redis", "status": "unavailable"})


async def validate_startup_configuration() -> None:
    """Validate required credentials and optional service connectivity.

    Exits the process with a clear message if a LINE credential is missing.
    """
    logger.info("startup_validation_begin")

    try:
        settings.require_credential("line_channel_secret", "LINE channel secret")
        settings.require_credential("line_channel_access_token", "LINE channel access token")
        logger.info("startup_validation", extra={"stage": "credentials", "status": "ok"})

        await check_redis_connectivity()

        logger.info("startup_validation_complete", extra={"status": "ok"})

    except ValueError as e:
        logger.error("startup_validation_failed", extra={"error": str(e)})
        print(f"\n❌ Startup validation failed: {e}\n", file=sys.stderr)  # noqa: T201
        sys.exit(1)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    # Configure logging first so validation logs are captured
    configure_logfire()

    await validate_startup_configuration()

    await init_db()
    logger.info("Database initialized")

    start_scheduler()
    yield
    # Shutdown
    stop_scheduler()
    await close_connection()
    await redis_client.close()


app = FastAPI(
    title="stockpile",
    description="Disaster-preparedness food stock manager living in LINE",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

# Register routers
app.include_router(webhook_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint with the session backend status."""
    return JSONResponse(content={"status": "healthy", "sessions": session_store.health()}, status_code=200)


@app.get("/health/scheduler")
async def scheduler_health_check() -> JSONResponse:
    """Scheduler health check endpoint with job statuses."""
    job_statuses = {EXPIRY_NOTIFICATIONS_JOB: job_tracker.get_job_status(EXPIRY_NOTIFICATIONS_JOB)}

    max_failures = max(status["consecutive_failures"] for status in job_statuses.values())

    overall_status = "healthy"
    if max_failures >= CRITICAL_CONSECUTIVE_FAILURES:
        overall_status = "critical"
    elif max_failures > 0:
        overall_status = "degraded"

    return JSONResponse(
        content={"status": overall_status, "jobs": job_statuses},
        status_code=200 if overall_status == "healthy" else 503,
    )
