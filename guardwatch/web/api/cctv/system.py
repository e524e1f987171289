"""System health endpoint."""

from fastapi import APIRouter

from ....shared.schemas.health import SystemHealthResponse
from ...auth.dependencies import CurrentUser
from ...dependencies import Registry

router = APIRouter()


@router.get("/health", response_model=SystemHealthResponse)
async def get_system_health(auth: CurrentUser, registry: Registry):
    """
    Camera, recording and zone counts with storage and bandwidth usage.
    """
    return SystemHealthResponse(health=await registry.get_system_health())
