"""
Snippetbox: Health Check Route
==============================

What:  ``GET /health`` for load balancers and container probes.
How:   Runs ``SELECT 1`` through the shared pool. The service is only
       healthy if it can reach its database.

Status levels:
    healthy    database reachable (HTTP 200)
    unhealthy  database unreachable (HTTP 503)
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text

from snippetbox import __version__
from snippetbox.application import Application, get_application
from snippetbox.schemas.snippet import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(application: Application = Depends(get_application)) -> JSONResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with application.snippets.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable", extra={"error": str(e)})

    body = HealthResponse(status=overall, version=__version__, database=db_status)
    return JSONResponse(
        status_code=200 if overall == "healthy" else 503,
        content=body.model_dump(),
    )
