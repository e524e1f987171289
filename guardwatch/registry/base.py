"""Registry contract shared by the local and remote implementations."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from ..shared.db.models import Severity, TriggerType, PTZCommand
from ..shared.geofence import zones_containing
from ..shared.schemas import (
    Camera,
    CameraCreate,
    CameraUpdate,
    GeofenceZone,
    GeofenceZoneCreate,
    GeofenceZoneUpdate,
    CCTVEvent,
    RecordingSession,
    SystemHealth,
)

CameraData = Union[CameraCreate, Dict[str, Any]]
CameraChanges = Union[CameraUpdate, Dict[str, Any]]
ZoneData = Union[GeofenceZoneCreate, Dict[str, Any]]
ZoneChanges = Union[GeofenceZoneUpdate, Dict[str, Any]]


class CCTVRegistry(ABC):
    """
    Catalog of cameras, geofence zones, events and recording sessions.

    Every operation returns values by copy. Commands that cannot be applied
    (unknown ids, invalid input, rejected state transitions) return ``None``
    or ``False`` instead of raising.
    """

    stream_base_url: str = "https://demo-stream.example.com"

    # Cameras

    @abstractmethod
    async def list_cameras(self) -> List[Camera]: ...

    @abstractmethod
    async def get_camera(self, camera_id: str) -> Optional[Camera]: ...

    @abstractmethod
    async def create_camera(self, data: CameraData) -> Optional[Camera]: ...

    @abstractmethod
    async def update_camera(self, camera_id: str, updates: CameraChanges) -> Optional[Camera]: ...

    @abstractmethod
    async def delete_camera(self, camera_id: str) -> bool: ...

    # Geofence zones

    @abstractmethod
    async def list_zones(self) -> List[GeofenceZone]: ...

    @abstractmethod
    async def get_zone(self, zone_id: str) -> Optional[GeofenceZone]: ...

    @abstractmethod
    async def create_zone(self, data: ZoneData) -> Optional[GeofenceZone]: ...

    @abstractmethod
    async def update_zone(self, zone_id: str, updates: ZoneChanges) -> Optional[GeofenceZone]: ...

    @abstractmethod
    async def delete_zone(self, zone_id: str) -> bool: ...

    # Events

    @abstractmethod
    async def list_events(
        self,
        limit: int = 100,
        camera_id: Optional[str] = None,
        severity: Optional[Severity] = None,
        acknowledged: Optional[bool] = None,
    ) -> List[CCTVEvent]: ...

    @abstractmethod
    async def get_event(self, event_id: str) -> Optional[CCTVEvent]: ...

    @abstractmethod
    async def record_event(self, event: CCTVEvent) -> Optional[CCTVEvent]: ...

    @abstractmethod
    async def acknowledge_event(self, event_id: str, actor: str) -> bool: ...

    # Recordings

    @abstractmethod
    async def start_recording(
        self,
        camera_id: str,
        trigger_type: Union[TriggerType, str] = TriggerType.MANUAL,
        duration: Optional[float] = None,
    ) -> Optional[RecordingSession]: ...

    @abstractmethod
    async def stop_recording(self, recording_id: str) -> bool: ...

    @abstractmethod
    async def list_recordings(self, camera_id: Optional[str] = None) -> List[RecordingSession]: ...

    @abstractmethod
    async def get_recording(self, recording_id: str) -> Optional[RecordingSession]: ...

    # Camera commands

    @abstractmethod
    async def control_ptz(
        self,
        camera_id: str,
        command: Union[PTZCommand, str],
        value: Optional[float] = None,
    ) -> bool: ...

    @abstractmethod
    async def take_screenshot(self, camera_id: str) -> Optional[str]: ...

    @abstractmethod
    async def enable_motion_detection(self, camera_id: str, sensitivity: int = 50) -> bool: ...

    @abstractmethod
    async def disable_motion_detection(self, camera_id: str) -> bool: ...

    # System

    @abstractmethod
    async def get_system_health(self) -> SystemHealth: ...

    async def check_point(self, point: Any) -> List[GeofenceZone]:
        """Active zones containing the point, in registry order."""
        return zones_containing(point, await self.list_zones(), active_only=True)

    def get_stream_url(self, camera_id: str, quality: str = "1080p") -> str:
        """Live stream URL for a camera."""
        return f"{self.stream_base_url}/camera/{camera_id}?quality={quality}"

    async def close(self) -> None:
        """Release resources held by the registry."""
