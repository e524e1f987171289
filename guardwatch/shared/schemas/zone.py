"""Geofence zone schemas."""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from ..db.models import ZoneType, ZonePriority


class GeoPoint(BaseModel):
    """Latitude/longitude pair."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class AlertSettings(BaseModel):
    """Who and what gets notified when a zone is breached."""
    notify_guards: bool = True
    notify_supervisors: bool = False
    sound_alarm: bool = False
    auto_lockdown: bool = False


class TimeRange(BaseModel):
    """Activation window, e.g. 18:00-06:00 on weekdays."""
    start_time: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    end_time: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    days: List[str] = Field(default_factory=list)


class ZoneSchedule(BaseModel):
    """Zone activation schedule (stored, not evaluated)."""
    enabled: bool = False
    time_ranges: List[TimeRange] = Field(default_factory=list)


class GeofenceZone(BaseModel):
    """Geofence zone entity."""
    id: str
    name: str
    description: Optional[str] = None
    type: ZoneType = ZoneType.MONITORING

    coordinates: List[GeoPoint] = Field(default_factory=list)
    center: Optional[GeoPoint] = None
    radius: Optional[float] = Field(None, gt=0)  # meters

    is_active: bool = True
    priority: ZonePriority = ZonePriority.MEDIUM
    camera_ids: List[str] = Field(default_factory=list)
    auto_recording: bool = False
    alert_settings: AlertSettings = Field(default_factory=AlertSettings)
    schedule: Optional[ZoneSchedule] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class GeofenceZoneCreate(BaseModel):
    """Create zone request schema."""
    id: Optional[str] = Field(None, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    type: ZoneType = ZoneType.MONITORING

    coordinates: List[GeoPoint] = Field(default_factory=list)
    center: Optional[GeoPoint] = None
    radius: Optional[float] = Field(None, gt=0)

    is_active: bool = True
    priority: ZonePriority = ZonePriority.MEDIUM
    camera_ids: List[str] = Field(default_factory=list)
    auto_recording: bool = False
    alert_settings: AlertSettings = Field(default_factory=AlertSettings)
    schedule: Optional[ZoneSchedule] = None


class GeofenceZoneUpdate(BaseModel):
    """Update zone request schema. Only fields that are set are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[ZoneType] = None

    coordinates: Optional[List[GeoPoint]] = None
    center: Optional[GeoPoint] = None
    radius: Optional[float] = Field(None, gt=0)

    is_active: Optional[bool] = None
    priority: Optional[ZonePriority] = None
    camera_ids: Optional[List[str]] = None
    auto_recording: Optional[bool] = None
    alert_settings: Optional[AlertSettings] = None
    schedule: Optional[ZoneSchedule] = None


class GeofenceZoneResponse(BaseModel):
    """Single zone response envelope."""
    zone: GeofenceZone


class GeofenceZoneListResponse(BaseModel):
    """Zone list response schema."""
    zones: List[GeofenceZone]
    total: int


class GeofenceCheckRequest(BaseModel):
    """Position report checked against active zones."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    subject: Optional[str] = None  # e.g. guard id


class GeofenceCheckResponse(BaseModel):
    """Zones containing the reported position."""
    inside: bool
    zones: List[GeofenceZone]
