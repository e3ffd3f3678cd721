"""Liveness and readiness probes. Neither requires an acting user."""

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from taskboard.db.base import ping_database

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "OK", "service": "taskboard"}


@router.get("/ready")
async def readiness_check():
    """503 until the database answers."""
    try:
        database = await ping_database()
    except (SQLAlchemyError, OSError) as exc:
        logger.error("readiness_database_unreachable", error=str(exc))
        database = False

    return JSONResponse(
        status_code=200 if database else 503,
        content={"status": "ready" if database else "degraded", "checks": {"database": database}},
    )
