"""SQLAlchemy ORM models for cameras, geofence zones, events and recordings."""

from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import (
    String,
    Text,
    Integer,
    BigInteger,
    Float,
    Boolean,
    DateTime,
    Enum,
    JSON,
    Index,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# Enums

class CameraStatus(str, PyEnum):
    """Camera operational status."""
    online = "online"
    offline = "offline"
    maintenance = "maintenance"
    error = "error"


class CameraType(str, PyEnum):
    """Camera hardware type."""
    fixed = "fixed"
    ptz = "ptz"
    dome = "dome"
    bullet = "bullet"


class Resolution(str, PyEnum):
    """Camera stream resolution."""
    HD = "720p"
    FULL_HD = "1080p"
    UHD = "4K"


class ZoneType(str, PyEnum):
    """Geofence zone purpose."""
    RESTRICTED = "restricted"
    MONITORING = "monitoring"
    ALERT = "alert"
    EMERGENCY = "emergency"


class ZonePriority(str, PyEnum):
    """Geofence zone priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class EventType(str, PyEnum):
    """Type of CCTV event."""
    MOTION_DETECTED = "motion_detected"
    ZONE_BREACH = "zone_breach"
    CAMERA_OFFLINE = "camera_offline"
    RECORDING_STARTED = "recording_started"
    ALERT_TRIGGERED = "alert_triggered"


class Severity(str, PyEnum):
    """Event severity level."""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class TriggerType(str, PyEnum):
    """What started a recording session."""
    MANUAL = "manual"
    MOTION = "motion"
    ZONE_BREACH = "zone_breach"
    INCIDENT = "incident"
    SCHEDULED = "scheduled"


class RecordingStatus(str, PyEnum):
    """Recording session status."""
    RECORDING = "recording"
    COMPLETED = "completed"
    FAILED = "failed"
    PROCESSING = "processing"


class PTZCommand(str, PyEnum):
    """Pan-tilt-zoom control command."""
    PAN_LEFT = "pan_left"
    PAN_RIGHT = "pan_right"
    TILT_UP = "tilt_up"
    TILT_DOWN = "tilt_down"
    ZOOM_IN = "zoom_in"
    ZOOM_OUT = "zoom_out"
    PRESET = "preset"


def _enum_values(enum_cls):
    return [e.value for e in enum_cls]


# Models

class CameraModel(Base):
    """Camera registered with the surveillance system."""
    __tablename__ = "cctv_cameras"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    latitude: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    status: Mapped[CameraStatus] = mapped_column(
        Enum(CameraStatus, values_callable=_enum_values),
        default=CameraStatus.offline, nullable=False
    )
    type: Mapped[CameraType] = mapped_column(
        Enum(CameraType, values_callable=_enum_values),
        default=CameraType.fixed, nullable=False
    )
    resolution: Mapped[Resolution] = mapped_column(
        Enum(Resolution, values_callable=_enum_values),
        default=Resolution.FULL_HD, nullable=False
    )

    # Capabilities
    has_audio: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_night_vision: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_motion_detection: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    motion_sensitivity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    zone_ids: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    stream_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ptz_position: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    last_ping: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_cctv_cameras_status", "status"),
    )


class GeofenceZoneModel(Base):
    """Circular or polygonal geofence zone."""
    __tablename__ = "cctv_geofence_zones"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    type: Mapped[ZoneType] = mapped_column(
        Enum(ZoneType, values_callable=_enum_values),
        default=ZoneType.MONITORING, nullable=False
    )

    # Shape: [{"latitude": .., "longitude": ..}, ...] plus optional circle
    coordinates: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    center: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    radius: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    priority: Mapped[ZonePriority] = mapped_column(
        Enum(ZonePriority, values_callable=_enum_values),
        default=ZonePriority.MEDIUM, nullable=False
    )
    camera_ids: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    auto_recording: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    alert_settings: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    schedule: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_cctv_zones_active", "is_active"),
    )


class CCTVEventModel(Base):
    """Surveillance event raised by a camera or geofence."""
    __tablename__ = "cctv_events"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    camera_id: Mapped[str] = mapped_column(String(64), nullable=False)
    camera_name: Mapped[str] = mapped_column(String(255), nullable=False)
    zone_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    zone_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    event_type: Mapped[EventType] = mapped_column(
        Enum(EventType, values_callable=_enum_values), nullable=False
    )
    severity: Mapped[Severity] = mapped_column(
        Enum(Severity, values_callable=_enum_values),
        default=Severity.INFO, nullable=False
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    # "metadata" is reserved on declarative classes
    event_metadata: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)

    # Acknowledgment
    acknowledged: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    acknowledged_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    acknowledged_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_cctv_events_camera_id", "camera_id"),
        Index("ix_cctv_events_timestamp", "timestamp"),
    )


class RecordingSessionModel(Base):
    """Video recording session for a camera."""
    __tablename__ = "cctv_recordings"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    camera_id: Mapped[str] = mapped_column(String(64), nullable=False)
    camera_name: Mapped[str] = mapped_column(String(255), nullable=False)

    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    duration: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    max_duration: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    file_size: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    storage_location: Mapped[str] = mapped_column(String(500), nullable=False)

    trigger_type: Mapped[TriggerType] = mapped_column(
        Enum(TriggerType, values_callable=_enum_values),
        default=TriggerType.MANUAL, nullable=False
    )
    status: Mapped[RecordingStatus] = mapped_column(
        Enum(RecordingStatus, values_callable=_enum_values),
        default=RecordingStatus.RECORDING, nullable=False
    )
    thumbnail_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    video_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_cctv_recordings_camera_id", "camera_id"),
        Index("ix_cctv_recordings_status", "status"),
    )
