"""Database module with async SQLAlchemy support."""

from .database import (
    init_db,
    close_db,
    get_engine,
    get_session_factory,
    session_scope,
    normalize_database_url,
)
from .models import (
    Base,
    CameraModel,
    GeofenceZoneModel,
    CCTVEventModel,
    RecordingSessionModel,
    CameraStatus,
    CameraType,
    Resolution,
    ZoneType,
    ZonePriority,
    EventType,
    Severity,
    TriggerType,
    RecordingStatus,
    PTZCommand,
)

__all__ = [
    # Database functions
    "init_db",
    "close_db",
    "get_engine",
    "get_session_factory",
    "session_scope",
    "normalize_database_url",
    # Models
    "Base",
    "CameraModel",
    "GeofenceZoneModel",
    "CCTVEventModel",
    "RecordingSessionModel",
    # Enums
    "CameraStatus",
    "CameraType",
    "Resolution",
    "ZoneType",
    "ZonePriority",
    "EventType",
    "Severity",
    "TriggerType",
    "RecordingStatus",
    "PTZCommand",
]
