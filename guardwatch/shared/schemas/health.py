"""System health schemas."""

from pydantic import BaseModel, Field


class SystemHealth(BaseModel):
    """Aggregate snapshot of the surveillance system."""
    total_cameras: int = 0
    online_cameras: int = 0
    recording_cameras: int = 0
    active_zones: int = 0
    storage_usage: float = Field(default=0.0, ge=0, le=100)  # percent
    bandwidth_usage: float = Field(default=0.0, ge=0, le=100)  # percent


class SystemHealthResponse(BaseModel):
    """System health response envelope."""
    health: SystemHealth
