"""CCTV event schemas."""

import uuid
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from ..db.models import EventType, Severity


def new_event_id() -> str:
    """Generate an event identifier."""
    return f"event-{uuid.uuid4().hex[:12]}"


class EventMetadata(BaseModel):
    """Optional detection details attached to an event."""
    confidence: Optional[float] = Field(None, ge=0, le=100)
    object_detected: Optional[str] = None
    recording_duration: Optional[float] = None
    screenshot_url: Optional[str] = None
    video_url: Optional[str] = None


class CCTVEvent(BaseModel):
    """CCTV event entity."""
    id: str = Field(default_factory=new_event_id)
    camera_id: str
    camera_name: str  # Denormalized snapshot
    zone_id: Optional[str] = None
    zone_name: Optional[str] = None

    event_type: EventType
    severity: Severity = Severity.INFO
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    metadata: Optional[EventMetadata] = None

    acknowledged: bool = False
    acknowledged_by: Optional[str] = None
    acknowledged_at: Optional[datetime] = None

    @property
    def message(self) -> str:
        """Human-readable event message."""
        messages = {
            EventType.MOTION_DETECTED: "Motion detected",
            EventType.ZONE_BREACH: "Zone breach",
            EventType.CAMERA_OFFLINE: "Camera offline",
            EventType.RECORDING_STARTED: "Recording started",
            EventType.ALERT_TRIGGERED: "Alert triggered",
        }
        text = f"{messages.get(self.event_type, 'Event')} on {self.camera_name}"
        if self.zone_name:
            text += f" ({self.zone_name})"
        return text


class EventResponse(BaseModel):
    """Single event response envelope."""
    event: CCTVEvent


class EventListResponse(BaseModel):
    """Event list response schema."""
    events: List[CCTVEvent]
    total: int


class AcknowledgeRequest(BaseModel):
    """Optional body for acknowledging an event on behalf of someone."""
    acknowledged_by: Optional[str] = None
