"""Pydantic schemas for entities, API requests and responses."""

from .camera import (
    Camera,
    CameraCreate,
    CameraUpdate,
    CameraResponse,
    CameraListResponse,
    PTZPosition,
    PTZRequest,
    MotionDetectionRequest,
    ScreenshotResponse,
)
from .zone import (
    GeoPoint,
    AlertSettings,
    TimeRange,
    ZoneSchedule,
    GeofenceZone,
    GeofenceZoneCreate,
    GeofenceZoneUpdate,
    GeofenceZoneResponse,
    GeofenceZoneListResponse,
    GeofenceCheckRequest,
    GeofenceCheckResponse,
)
from .event import (
    CCTVEvent,
    EventMetadata,
    EventResponse,
    EventListResponse,
    AcknowledgeRequest,
    new_event_id,
)
from .recording import (
    RecordingSession,
    StartRecordingRequest,
    RecordingResponse,
    RecordingListResponse,
)
from .health import SystemHealth, SystemHealthResponse

__all__ = [
    # Camera
    "Camera",
    "CameraCreate",
    "CameraUpdate",
    "CameraResponse",
    "CameraListResponse",
    "PTZPosition",
    "PTZRequest",
    "MotionDetectionRequest",
    "ScreenshotResponse",
    # Zone
    "GeoPoint",
    "AlertSettings",
    "TimeRange",
    "ZoneSchedule",
    "GeofenceZone",
    "GeofenceZoneCreate",
    "GeofenceZoneUpdate",
    "GeofenceZoneResponse",
    "GeofenceZoneListResponse",
    "GeofenceCheckRequest",
    "GeofenceCheckResponse",
    # Event
    "CCTVEvent",
    "EventMetadata",
    "EventResponse",
    "EventListResponse",
    "AcknowledgeRequest",
    "new_event_id",
    # Recording
    "RecordingSession",
    "StartRecordingRequest",
    "RecordingResponse",
    "RecordingListResponse",
    # Health
    "SystemHealth",
    "SystemHealthResponse",
]
