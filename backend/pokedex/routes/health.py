"""
Pokedex Backend — Health Check Route
=====================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings the record store with SELECT 1.

    healthy:   store reachable (HTTP 200)
    unhealthy: store unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from pokedex import __version__
from pokedex.schemas.pokemon import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Record store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    database = getattr(request.app.state, "database", None)
    connected = database is not None and await database.ping()

    body = HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if not connected:
        logger.warning("Health check: record store unreachable")
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
