"""
Notebox — Health Check and Service Index Routes
================================================

What:  GET /health for monitoring probes and GET / describing the API.
How:   The health check runs SELECT 1 on the engine and reports the result;
       it always answers 200 so probes can tell "process up, DB down"
       (status="degraded") apart from "process down".
Who:   Docker health checks, load balancers, and humans exploring the API.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text

from notebox import __version__
from notebox.config import settings
from notebox.schemas.note import HealthResponse, IndexResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Module-level: initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    overall = "OK"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        from notebox.database import engine
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "degraded"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        timestamp=datetime.now(timezone.utc),
        uptime_seconds=round(time.time() - _start_time, 2),
        database=db_status,
    )


@router.get(
    "/",
    response_model=IndexResponse,
    summary="API index",
)
async def index() -> IndexResponse:
    return IndexResponse(
        message="Notebox API",
        version=__version__,
        environment=settings.environment,
        endpoints={
            "notes": "/api/notes",
            "search": "/api/notes/search?q=term",
            "health": "/health",
        },
    )
