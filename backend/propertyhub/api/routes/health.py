"""Health Routes — liveness and database readiness for the listing API.

Invariants:
    - GET /api/v1/health/ answers 200 while the process serves requests
    - GET /api/v1/health/ready answers 503 {status: not_ready, reason} when the
      lifespan has not attached a database handle or SELECT 1 fails

Design Decisions:
    - Version comes from the FastAPI app, so the body tracks the released build
    - Readiness reads app.state.db directly rather than get_db_manager:
      a missing handle is "not ready", not a 500
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "propertyhub-api"


def _not_ready(reason: str) -> JSONResponse:
    logger.warning(f"Readiness check failed: {reason}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "reason": reason},
    )


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness(request: Request):
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": request.app.version,
    }


@router.get("/ready")
async def readiness(request: Request):
    """Database round trip through the shared session manager."""
    manager = getattr(request.app.state, "db", None)
    if manager is None or not await manager.health_check():
        return _not_ready("database_unavailable")
    return {"status": "ready", "checks": {"database": "healthy"}}
