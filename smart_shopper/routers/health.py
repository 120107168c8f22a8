import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from smart_shopper.core.config import settings
from smart_shopper.core.dependencies import get_db_ping
from smart_shopper.schemas.base import utc_now

router = APIRouter(prefix="/health", tags=["Health"])
logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()
VERSION = "1.0.0"


@router.get("")
async def health_check(ping: Callable[[], Awaitable[None]] = Depends(get_db_ping)):
    """Service health, including a database round trip"""
    try:
        await ping()
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "success": False,
                "message": "Service is unhealthy",
                "error": str(e),
                "timestamp": utc_now().isoformat(),
            },
        )

    return {
        "success": True,
        "message": "Service is healthy",
        "timestamp": utc_now().isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "environment": settings.ENVIRONMENT,
        "version": VERSION,
    }


@router.get("/db")
async def database_health(ping: Callable[[], Awaitable[None]] = Depends(get_db_ping)):
    try:
        await ping()
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"success": False, "message": "Database connection failed", "error": str(e)},
        )
    return {"success": True, "message": "Database connection is healthy"}
