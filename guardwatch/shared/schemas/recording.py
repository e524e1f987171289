"""Recording session schemas."""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from ..db.models import TriggerType, RecordingStatus


class RecordingSession(BaseModel):
    """Recording session entity."""
    id: str
    camera_id: str
    camera_name: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[float] = None  # seconds
    max_duration: Optional[float] = None  # requested length, seconds
    file_size: Optional[int] = None  # bytes
    storage_location: str
    trigger_type: TriggerType = TriggerType.MANUAL
    status: RecordingStatus = RecordingStatus.RECORDING
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == RecordingStatus.RECORDING


class StartRecordingRequest(BaseModel):
    """Start recording request schema."""
    camera_id: str
    duration: Optional[float] = Field(None, gt=0)
    trigger_type: TriggerType = TriggerType.MANUAL


class RecordingResponse(BaseModel):
    """Single recording response envelope."""
    recording: RecordingSession


class RecordingListResponse(BaseModel):
    """Recording list response schema."""
    recordings: List[RecordingSession]
    total: int
