"""
PicPlace Backend — Health Check Route
=======================================

What:  Health check endpoint for monitoring and load balancers.
How:   Runs SELECT 1 against the database. With ?deep=true it also checks
       the geocoder, which is a third-party service and therefore only ever
       degrades the status, never makes it unhealthy.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - degraded:  database reachable, geocoder not (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Query, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from picplace import __version__
from picplace import database
from picplace.schemas.common import HealthResponse
from picplace.services.geocoding_service import geocoding_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(
    response: Response,
    deep: bool = Query(default=False, description="Also check the geocoder"),
) -> HealthResponse:
    db_status = "connected"
    geocoder_status = None
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Geocoder ────────────────────────────────────────────────────
    if deep:
        if await geocoding_service.health_check():
            geocoder_status = "available"
        else:
            geocoder_status = "unavailable"
            overall = "degraded" if overall != "unhealthy" else overall

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        geocoder=geocoder_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
