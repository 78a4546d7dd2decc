"""FastAPI server for the Arsana letter archive"""

from __future__ import annotations

import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from arsana.api.middleware.request_logging import RequestLoggingMiddleware
from arsana.api.middleware.security_headers import SecurityHeadersMiddleware
from arsana.api.routes.calendar import router as calendar_router
from arsana.api.routes.health import router as health_router
from arsana.api.routes.notifications import router as notifications_router
from arsana.config import (
    API_HOST,
    API_PORT,
    APP_VERSION,
    FRONTEND_ORIGIN,
    SCHEDULER_ENABLED,
    is_production,
)
from arsana.infrastructure.database import init_database, reset_pool
from arsana.observability.logging import get_logger
from arsana.observability.telemetry import counter, log_event
from arsana.scheduler import start_cron_jobs

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    try:
        logger.info("Initializing database schema...")
        init_database()
        logger.info("Database initialization complete")
    except sqlite3.OperationalError as e:
        logger.critical("Database schema error: %s", e)
        raise RuntimeError(f"Database initialization failed: {e}") from e
    except Exception as e:
        logger.critical("Unexpected database initialization error: %s", e)
        raise RuntimeError(f"Database initialization failed: {e}") from e

    # Scheduler failures never block the API from serving
    app.state.job_registry = start_cron_jobs() if SCHEDULER_ENABLED else None
    log_event("api.startup", service="arsana", version=APP_VERSION)

    yield

    if app.state.job_registry is not None:
        app.state.job_registry.stop()
    reset_pool()
    log_event("api.shutdown", service="arsana")


app = FastAPI(title="Arsana Letter Archive API", version=APP_VERSION, lifespan=lifespan)


# Custom validation error handler to prevent information leakage
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
    counter("api.validation_errors")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Invalid request format",
            "invalid_fields": [str(err["loc"][-1]) for err in exc.errors()],
        },
    )


ALLOWED_ORIGINS = [FRONTEND_ORIGIN]

# Allow localhost in development only
if not is_production():
    ALLOWED_ORIGINS.extend(
        [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=sorted(set(ALLOWED_ORIGINS)),
    allow_credentials=True,
    allow_methods=["GET", "PUT", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID", "X-User-ID"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(health_router)
app.include_router(calendar_router)
app.include_router(notifications_router)


@app.get("/")
def root() -> dict[str, Any]:
    return {
        "service": "Arsana Letter Archive API",
        "version": APP_VERSION,
        "status": "running",
        "endpoints": {
            "health": "/health",
            "calendar_events": "/api/calendar/events",
            "calendar_upcoming": "/api/calendar/upcoming",
            "notifications": "/api/notifications",
            "notifications_read_all": "/api/notifications/read-all",
        },
    }


def main() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run("arsana.api.app:app", host=API_HOST, port=API_PORT)
