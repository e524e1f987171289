"""Events API endpoints."""

from typing import Optional

from fastapi import APIRouter, Body, HTTPException, Query, status

from ....shared.db.models import Severity
from ....shared.schemas.event import (
    CCTVEvent,
    EventResponse,
    EventListResponse,
    AcknowledgeRequest,
)
from ...auth.dependencies import CurrentUser
from ...dependencies import Dispatcher, Registry

router = APIRouter()


def event_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Event not found",
    )


@router.get("", response_model=EventListResponse)
async def list_events(
    auth: CurrentUser,
    registry: Registry,
    limit: int = Query(default=100, ge=1, le=1000),
    camera_id: Optional[str] = None,
    severity: Optional[Severity] = None,
    acknowledged: Optional[bool] = None,
):
    """
    List events, newest first.
    """
    events = await registry.list_events(
        limit=limit,
        camera_id=camera_id,
        severity=severity,
        acknowledged=acknowledged,
    )
    return EventListResponse(events=events, total=len(events))


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def record_event(
    event: CCTVEvent,
    auth: CurrentUser,
    registry: Registry,
    dispatcher: Dispatcher,
):
    """
    Record an externally triggered event and push it to live subscribers.
    """
    recorded = await registry.record_event(event)
    if not recorded:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Event {event.id} already recorded",
        )
    if dispatcher is not None:
        await dispatcher.publish(recorded)
    return EventResponse(event=recorded)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: str, auth: CurrentUser, registry: Registry):
    event = await registry.get_event(event_id)
    if not event:
        raise event_not_found()
    return EventResponse(event=event)


@router.put("/{event_id}/acknowledge", response_model=EventResponse)
async def acknowledge_event(
    event_id: str,
    auth: CurrentUser,
    registry: Registry,
    data: Optional[AcknowledgeRequest] = Body(default=None),
):
    """
    Acknowledge an event.

    The actor is the authenticated user unless the body names someone else.
    Acknowledging twice keeps the first actor and timestamp.
    """
    actor = (data.acknowledged_by if data else None) or auth.name
    if not await registry.acknowledge_event(event_id, actor):
        raise event_not_found()

    event = await registry.get_event(event_id)
    if not event:
        raise event_not_found()
    return EventResponse(event=event)
