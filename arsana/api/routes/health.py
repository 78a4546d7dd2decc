"""Health check endpoints for the Arsana API.

- /health - Service liveness, scheduler state
- /health/db - Database connection pool health
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request

from arsana.config import APP_VERSION

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request) -> dict[str, Any]:
    """Health check endpoint.

    Reports which scheduled jobs are registered (empty when the scheduler
    is disabled or failed to start).
    """
    registry = getattr(request.app.state, "job_registry", None)

    return {
        "status": "healthy",
        "service": "Arsana API",
        "version": APP_VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
        "scheduler": {
            "running": bool(registry and getattr(registry.scheduler, "running", False)),
            "jobs": list(registry.registered) if registry else [],
        },
    }


@router.get("/health/db")
async def database_health() -> dict[str, Any]:
    """
    Database health check endpoint.

    Alerts if pool usage exceeds 80%.
    """
    from arsana.infrastructure.database import get_pool_stats

    stats = get_pool_stats()
    usage_percent = stats["usage_percent"]

    return {
        "status": "degraded" if usage_percent > 80 else "healthy",
        "pool": stats,
        "warning": "Pool usage high" if usage_percent > 80 else None,
    }
