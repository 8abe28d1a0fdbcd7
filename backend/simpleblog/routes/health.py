"""
SimpleBlog Backend — Health Check Route
=========================================

What:  GET /health for container health checks and load balancers.
How:   Runs SELECT 1 against the app's engine.

Status levels:
    - healthy:   store reachable (HTTP 200)
    - unhealthy: store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from starlette.requests import Request

from simpleblog import __version__
from simpleblog.database import ping
from simpleblog.schemas.post import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(request: Request):
    db_status = "connected"
    overall = "healthy"
    status_code = 200

    try:
        await ping(request.app.state.engine)
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        status_code = 503
        logger.warning("Health check: store unreachable: %s", str(e))

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())
