"""Geofence zone API endpoints."""

from fastapi import APIRouter, HTTPException, status

from ....shared.schemas.event import EventListResponse
from ....shared.schemas.zone import (
    GeofenceZoneCreate,
    GeofenceZoneUpdate,
    GeofenceZoneResponse,
    GeofenceZoneListResponse,
    GeofenceCheckRequest,
    GeofenceCheckResponse,
)
from ...auth.dependencies import CurrentUser, ManagerUser
from ...dependencies import Dispatcher, Registry

router = APIRouter()


def zone_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Zone not found",
    )


@router.get("/zones", response_model=GeofenceZoneListResponse)
async def list_zones(auth: CurrentUser, registry: Registry):
    zones = await registry.list_zones()
    return GeofenceZoneListResponse(zones=zones, total=len(zones))


@router.get("/zones/{zone_id}", response_model=GeofenceZoneResponse)
async def get_zone(zone_id: str, auth: CurrentUser, registry: Registry):
    zone = await registry.get_zone(zone_id)
    if not zone:
        raise zone_not_found()
    return GeofenceZoneResponse(zone=zone)


@router.post("/zones", response_model=GeofenceZoneResponse, status_code=status.HTTP_201_CREATED)
async def create_zone(data: GeofenceZoneCreate, auth: ManagerUser, registry: Registry):
    """
    Create a geofence zone. Unknown camera ids are dropped.
    """
    if data.id and await registry.get_zone(data.id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Zone {data.id} already exists",
        )

    zone = await registry.create_zone(data)
    if not zone:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Zone could not be created",
        )
    return GeofenceZoneResponse(zone=zone)


@router.put("/zones/{zone_id}", response_model=GeofenceZoneResponse)
async def update_zone(
    zone_id: str,
    data: GeofenceZoneUpdate,
    auth: ManagerUser,
    registry: Registry,
):
    if not await registry.get_zone(zone_id):
        raise zone_not_found()

    zone = await registry.update_zone(zone_id, data)
    if not zone:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Zone could not be updated",
        )
    return GeofenceZoneResponse(zone=zone)


@router.delete("/zones/{zone_id}")
async def delete_zone(zone_id: str, auth: ManagerUser, registry: Registry):
    """
    Delete a zone and detach it from its cameras.
    """
    if not await registry.delete_zone(zone_id):
        raise zone_not_found()
    return {"success": True}


@router.post("/check", response_model=GeofenceCheckResponse)
async def check_point(data: GeofenceCheckRequest, auth: CurrentUser, registry: Registry):
    """
    Which active zones contain a position. No events are emitted.
    """
    zones = await registry.check_point(data)
    return GeofenceCheckResponse(inside=bool(zones), zones=zones)


@router.post("/report", response_model=EventListResponse)
async def report_position(
    data: GeofenceCheckRequest,
    auth: CurrentUser,
    dispatcher: Dispatcher,
):
    """
    Report a guard position; emits zone_breach events for restricted zones.

    The subject defaults to the authenticated user.
    """
    if dispatcher is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Event dispatcher not running",
        )
    events = await dispatcher.report_position(data, data.subject or auth.user_id)
    return EventListResponse(events=events, total=len(events))
