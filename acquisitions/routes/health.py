"""
Health check and greeting endpoints
"""
from datetime import datetime, timezone
from typing import Any, Dict
import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from ..db import check_db_connection
from ..limiter import limiter, rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
@limiter.limit(rate_limit)
def root(request: Request):
    logger.info("Hello from acquisitions")
    return "Hello from acquisitions"


@router.get("/api", response_class=PlainTextResponse)
@limiter.limit(rate_limit)
def api_root(request: Request):
    logger.info("This is the acquisitions API")
    return "This is the acquisitions API"


@router.get("/health", status_code=status.HTTP_200_OK)
@limiter.limit(rate_limit)
def health_check(request: Request) -> Dict[str, Any]:
    """
    Basic health check endpoint.

    Returns:
        dict: Health status and timestamp
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/ready", status_code=status.HTTP_200_OK)
@limiter.limit(rate_limit)
def readiness_check(request: Request):
    """
    Readiness check: 200 when the database answers, 503 otherwise.
    """
    db_connected = check_db_connection(request.app.state.engine)
    body = {
        "status": "ready" if db_connected else "not_ready",
        "database": "connected" if db_connected else "disconnected",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
    if not db_connected:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body
