"""Entity stores backing the local registry.

A store only persists and returns entities; the status rules live in
``LocalRegistry``. Every read returns a copy, so callers never share
mutable state with the store.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Iterable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..shared.db.database import session_scope
from ..shared.db.models import Severity
from ..shared.db.repositories import (
    CameraRepository,
    GeofenceZoneRepository,
    EventRepository,
    RecordingRepository,
    camera_from_row,
    camera_to_row,
    zone_from_row,
    zone_to_row,
    event_from_row,
    event_to_row,
    recording_from_row,
    recording_to_row,
)
from ..shared.schemas import Camera, GeofenceZone, CCTVEvent, RecordingSession


class CCTVStore(ABC):
    """Persistence contract for cameras, zones, events and recordings."""

    # Cameras
    @abstractmethod
    async def list_cameras(self) -> List[Camera]: ...

    @abstractmethod
    async def get_camera(self, camera_id: str) -> Optional[Camera]: ...

    @abstractmethod
    async def save_camera(self, camera: Camera) -> Camera: ...

    @abstractmethod
    async def delete_camera(self, camera_id: str) -> bool: ...

    # Zones
    @abstractmethod
    async def list_zones(self) -> List[GeofenceZone]: ...

    @abstractmethod
    async def get_zone(self, zone_id: str) -> Optional[GeofenceZone]: ...

    @abstractmethod
    async def save_zone(self, zone: GeofenceZone) -> GeofenceZone: ...

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
    async def save_event(self, event: CCTVEvent) -> CCTVEvent: ...

    # Recordings
    @abstractmethod
    async def list_recordings(self, camera_id: Optional[str] = None) -> List[RecordingSession]: ...

    @abstractmethod
    async def get_recording(self, recording_id: str) -> Optional[RecordingSession]: ...

    @abstractmethod
    async def save_recording(self, recording: RecordingSession) -> RecordingSession: ...

    async def close(self) -> None:
        """Release resources held by the store."""


class MemoryStore(CCTVStore):
    """In-memory store, used for demos, tests and as the default backend."""

    def __init__(
        self,
        cameras: Iterable[Camera] = (),
        zones: Iterable[GeofenceZone] = (),
        events: Iterable[CCTVEvent] = (),
        recordings: Iterable[RecordingSession] = (),
    ):
        self._cameras: Dict[str, Camera] = {c.id: c.model_copy(deep=True) for c in cameras}
        self._zones: Dict[str, GeofenceZone] = {z.id: z.model_copy(deep=True) for z in zones}
        self._events: Dict[str, CCTVEvent] = {e.id: e.model_copy(deep=True) for e in events}
        self._recordings: Dict[str, RecordingSession] = {
            r.id: r.model_copy(deep=True) for r in recordings
        }

    @staticmethod
    def _copy(item):
        return item.model_copy(deep=True) if item is not None else None

    # Cameras

    async def list_cameras(self) -> List[Camera]:
        return [self._copy(c) for c in self._cameras.values()]

    async def get_camera(self, camera_id: str) -> Optional[Camera]:
        return self._copy(self._cameras.get(camera_id))

    async def save_camera(self, camera: Camera) -> Camera:
        self._cameras[camera.id] = self._copy(camera)
        return self._copy(camera)

    async def delete_camera(self, camera_id: str) -> bool:
        return self._cameras.pop(camera_id, None) is not None

    # Zones

    async def list_zones(self) -> List[GeofenceZone]:
        return [self._copy(z) for z in self._zones.values()]

    async def get_zone(self, zone_id: str) -> Optional[GeofenceZone]:
        return self._copy(self._zones.get(zone_id))

    async def save_zone(self, zone: GeofenceZone) -> GeofenceZone:
        self._zones[zone.id] = self._copy(zone)
        return self._copy(zone)

    async def delete_zone(self, zone_id: str) -> bool:
        return self._zones.pop(zone_id, None) is not None

    # Events

    async def list_events(
        self,
        limit: int = 100,
        camera_id: Optional[str] = None,
        severity: Optional[Severity] = None,
        acknowledged: Optional[bool] = None,
    ) -> List[CCTVEvent]:
        events = [
            e for e in self._events.values()
            if (camera_id is None or e.camera_id == camera_id)
            and (severity is None or e.severity == severity)
            and (acknowledged is None or e.acknowledged == acknowledged)
        ]
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return [self._copy(e) for e in events[:limit]]

    async def get_event(self, event_id: str) -> Optional[CCTVEvent]:
        return self._copy(self._events.get(event_id))

    async def save_event(self, event: CCTVEvent) -> CCTVEvent:
        self._events[event.id] = self._copy(event)
        return self._copy(event)

    # Recordings

    async def list_recordings(self, camera_id: Optional[str] = None) -> List[RecordingSession]:
        recordings = [
            r for r in self._recordings.values()
            if camera_id is None or r.camera_id == camera_id
        ]
        recordings.sort(key=lambda r: r.start_time, reverse=True)
        return [self._copy(r) for r in recordings]

    async def get_recording(self, recording_id: str) -> Optional[RecordingSession]:
        return self._copy(self._recordings.get(recording_id))

    async def save_recording(self, recording: RecordingSession) -> RecordingSession:
        self._recordings[recording.id] = self._copy(recording)
        return self._copy(recording)


class SqlStore(CCTVStore):
    """
    SQLAlchemy-backed store.

    Each call runs in its own session and commits on success.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    # Cameras

    async def list_cameras(self) -> List[Camera]:
        async with session_scope(self.session_factory) as session:
            rows = await CameraRepository(session).get_all()
            return [camera_from_row(r) for r in rows]

    async def get_camera(self, camera_id: str) -> Optional[Camera]:
        async with session_scope(self.session_factory) as session:
            row = await CameraRepository(session).get_by_id(camera_id)
            return camera_from_row(row) if row else None

    async def save_camera(self, camera: Camera) -> Camera:
        async with session_scope(self.session_factory) as session:
            row = await CameraRepository(session).upsert(camera_to_row(camera))
            return camera_from_row(row)

    async def delete_camera(self, camera_id: str) -> bool:
        async with session_scope(self.session_factory) as session:
            return await CameraRepository(session).delete(camera_id)

    # Zones

    async def list_zones(self) -> List[GeofenceZone]:
        async with session_scope(self.session_factory) as session:
            rows = await GeofenceZoneRepository(session).get_all()
            return [zone_from_row(r) for r in rows]

    async def get_zone(self, zone_id: str) -> Optional[GeofenceZone]:
        async with session_scope(self.session_factory) as session:
            row = await GeofenceZoneRepository(session).get_by_id(zone_id)
            return zone_from_row(row) if row else None

    async def save_zone(self, zone: GeofenceZone) -> GeofenceZone:
        async with session_scope(self.session_factory) as session:
            row = await GeofenceZoneRepository(session).upsert(zone_to_row(zone))
            return zone_from_row(row)

    async def delete_zone(self, zone_id: str) -> bool:
        async with session_scope(self.session_factory) as session:
            return await GeofenceZoneRepository(session).delete(zone_id)

    # Events

    async def list_events(
        self,
        limit: int = 100,
        camera_id: Optional[str] = None,
        severity: Optional[Severity] = None,
        acknowledged: Optional[bool] = None,
    ) -> List[CCTVEvent]:
        async with session_scope(self.session_factory) as session:
            rows = await EventRepository(session).get_filtered(
                camera_id=camera_id,
                severity=severity,
                acknowledged=acknowledged,
                limit=limit,
            )
            return [event_from_row(r) for r in rows]

    async def get_event(self, event_id: str) -> Optional[CCTVEvent]:
        async with session_scope(self.session_factory) as session:
            row = await EventRepository(session).get_by_id(event_id)
            return event_from_row(row) if row else None

    async def save_event(self, event: CCTVEvent) -> CCTVEvent:
        async with session_scope(self.session_factory) as session:
            row = await EventRepository(session).upsert(event_to_row(event))
            return event_from_row(row)

    # Recordings

    async def list_recordings(self, camera_id: Optional[str] = None) -> List[RecordingSession]:
        async with session_scope(self.session_factory) as session:
            rows = await RecordingRepository(session).get_by_camera(camera_id)
            return [recording_from_row(r) for r in rows]

    async def get_recording(self, recording_id: str) -> Optional[RecordingSession]:
        async with session_scope(self.session_factory) as session:
            row = await RecordingRepository(session).get_by_id(recording_id)
            return recording_from_row(row) if row else None

    async def save_recording(self, recording: RecordingSession) -> RecordingSession:
        async with session_scope(self.session_factory) as session:
            row = await RecordingRepository(session).upsert(recording_to_row(recording))
            return recording_from_row(row)
