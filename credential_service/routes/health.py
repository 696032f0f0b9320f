"""
Health check endpoints for the Credential Service
"""
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from ..schemas import HealthResponse, ReadinessResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health_check() -> HealthResponse:
    """
    Liveness check. Static; does not touch the database.
    """
    return HealthResponse(status="ok", message="Server is running")


@router.get("/ready", response_model=ReadinessResponse, status_code=status.HTTP_200_OK)
async def readiness_check(request: Request):
    """
    Readiness check: the credential store answers a trivial query.

    Returns 503 if the database cannot be reached.
    """
    pinged = await request.app.state.store.ping()
    if not pinged.ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=ReadinessResponse(status="not_ready", database="disconnected").model_dump()
        )
    return ReadinessResponse(status="ready", database="connected")
