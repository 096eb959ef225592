"""Health & Readiness Probes.

Invariants:
    - GET /health/ is 200 whenever the process serves requests (liveness)
    - GET /health/ready is 503 until both the database answers and the
      feed client exists; a gate cannot decide without either

Design Decisions:
    - Readiness does not call any reserve feed: one slow feed host must not
      pull every instance out of the load balancer
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from porgate.infrastructure import database

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": "porgate-api", "version": "1.0.0"}


@router.get("/ready")
async def readiness_check(request: Request):
    """Database round trip plus feed client presence."""
    manager = database.db_manager
    checks = {
        "database": "healthy" if manager and await manager.health_check() else "unavailable",
        "feed_client": (
            "healthy" if getattr(request.app.state, "feed_factory", None)
            else "unavailable"
        ),
    }
    if any(v != "healthy" for v in checks.values()):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
