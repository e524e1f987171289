"""Camera schemas."""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from ..db.models import CameraStatus, CameraType, Resolution, PTZCommand


class PTZPosition(BaseModel):
    """Current pan/tilt/zoom state of a PTZ camera."""
    pan: float = 0.0  # degrees, -180..180
    tilt: float = 0.0  # degrees, -90..90
    zoom: float = 1.0  # optical multiplier, 1..20
    preset: Optional[int] = None


class Camera(BaseModel):
    """Camera entity."""
    id: str
    name: str
    location: str = ""
    latitude: float = 0.0
    longitude: float = 0.0

    status: CameraStatus = CameraStatus.offline
    type: CameraType = CameraType.fixed
    resolution: Resolution = Resolution.FULL_HD

    has_audio: bool = False
    has_night_vision: bool = False
    has_motion_detection: bool = False
    motion_sensitivity: Optional[int] = Field(None, ge=0, le=100)

    zone_ids: List[str] = Field(default_factory=list)
    stream_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    ptz_position: Optional[PTZPosition] = None

    last_ping: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class CameraCreate(BaseModel):
    """Create camera request schema."""
    id: Optional[str] = Field(None, max_length=64)  # Generated when omitted
    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(default="", max_length=255)
    latitude: float = Field(default=0.0, ge=-90, le=90)
    longitude: float = Field(default=0.0, ge=-180, le=180)

    status: CameraStatus = CameraStatus.offline
    type: CameraType = CameraType.fixed
    resolution: Resolution = Resolution.FULL_HD

    has_audio: bool = False
    has_night_vision: bool = False
    has_motion_detection: bool = False

    zone_ids: List[str] = Field(default_factory=list)
    stream_url: Optional[str] = None
    thumbnail_url: Optional[str] = None


class CameraUpdate(BaseModel):
    """Update camera request schema. Only fields that are set are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    status: Optional[CameraStatus] = None
    type: Optional[CameraType] = None
    resolution: Optional[Resolution] = None

    has_audio: Optional[bool] = None
    has_night_vision: Optional[bool] = None
    has_motion_detection: Optional[bool] = None

    zone_ids: Optional[List[str]] = None
    stream_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    last_ping: Optional[datetime] = None


class CameraResponse(BaseModel):
    """Single camera response envelope."""
    camera: Camera


class CameraListResponse(BaseModel):
    """Camera list response schema."""
    cameras: List[Camera]
    total: int


class PTZRequest(BaseModel):
    """PTZ control request schema."""
    command: PTZCommand
    value: Optional[float] = None


class MotionDetectionRequest(BaseModel):
    """Motion detection toggle request schema."""
    enabled: bool
    sensitivity: Optional[int] = Field(None, ge=0, le=100)


class ScreenshotResponse(BaseModel):
    """Screenshot capture response schema."""
    screenshot_url: str
