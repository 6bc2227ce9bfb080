"""Health check endpoint for monitoring service status."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from sup_notifier.dependencies import NotificationServerDep

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    registered_users: int
    active_connections: int


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check(server: NotificationServerDep) -> HealthResponse:
    """
    Report the notification server's status.

    Returns:
        HealthResponse: Number of users with a registered connection and
        number of open connections being liveness-checked.
    """
    return HealthResponse(
        status="healthy",
        registered_users=len(server.registry),
        active_connections=len(server.monitor),
    )
