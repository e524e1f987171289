"""Registry that owns the CCTV status rules and persists through a store."""

import os
import shutil
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ValidationError

from ..config import config
from ..shared.aio import maybe_await
from ..shared.db.models import (
    CameraStatus,
    CameraType,
    EventType,
    PTZCommand,
    RecordingStatus,
    Resolution,
    Severity,
    TriggerType,
)
from ..shared.schemas import (
    Camera,
    CameraCreate,
    CameraUpdate,
    CCTVEvent,
    EventMetadata,
    GeofenceZone,
    GeofenceZoneCreate,
    GeofenceZoneUpdate,
    PTZPosition,
    RecordingSession,
    SystemHealth,
)
from .base import CCTVRegistry, CameraChanges, CameraData, ZoneChanges, ZoneData
from .stores import CCTVStore

# Approximate stream bitrate per resolution, Mbit/s
BITRATE_MBPS = {
    Resolution.HD: 2.0,
    Resolution.FULL_HD: 4.0,
    Resolution.UHD: 16.0,
}

PAN_LIMIT = 180.0
TILT_LIMIT = 90.0
ZOOM_MIN, ZOOM_MAX = 1.0, 20.0
DEFAULT_PTZ_STEP = {"pan": 10.0, "tilt": 5.0, "zoom": 1.0}


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _parse(schema: type, data: Any) -> Optional[BaseModel]:
    """Validate request data into a schema, None on validation failure."""
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        print(f"[REGISTRY] Invalid {schema.__name__}: {e.error_count()} error(s)")
        return None


class UsageMeter:
    """
    Storage and bandwidth utilization for system health.

    Storage is the disk usage of the volume holding the recordings directory.
    Bandwidth is the summed bitrate of online cameras against the uplink.
    """

    def __init__(self, recordings_dir: str, uplink_mbps: float):
        self.recordings_dir = recordings_dir
        self.uplink_mbps = uplink_mbps

    def storage_usage(self) -> float:
        path = self.recordings_dir if os.path.isdir(self.recordings_dir) else "."
        try:
            usage = shutil.disk_usage(path)
        except OSError as e:
            print(f"[REGISTRY] Disk usage unavailable for {path}: {e}")
            return 0.0
        if usage.total <= 0:
            return 0.0
        return round(usage.used / usage.total * 100, 1)

    def bandwidth_usage(self, cameras: Iterable[Camera]) -> float:
        if self.uplink_mbps <= 0:
            return 0.0
        demand = sum(
            BITRATE_MBPS.get(c.resolution, 4.0)
            for c in cameras
            if c.status == CameraStatus.online
        )
        return round(min(100.0, demand / self.uplink_mbps * 100), 1)

    def __call__(self, cameras: List[Camera]) -> Tuple[float, float]:
        return self.storage_usage(), self.bandwidth_usage(cameras)


class LocalRegistry(CCTVRegistry):
    """
    Registry implementation with in-process state rules.

    Args:
        store: Persistence backend (memory or SQL)
        event_sink: Called with every event the registry generates itself
            (camera offline, recording started). May be sync or async.
        usage_meter: Callable returning (storage %, bandwidth %) for cameras
        single_active_recording: Reject a second start while a camera records
        clock: Source of "now", naive UTC
    """

    def __init__(
        self,
        store: CCTVStore,
        event_sink: Optional[Callable[[CCTVEvent], Any]] = None,
        usage_meter: Optional[Callable[[List[Camera]], Tuple[float, float]]] = None,
        single_active_recording: bool = config.SINGLE_ACTIVE_RECORDING,
        recordings_dir: str = config.RECORDINGS_DIR,
        media_base_url: str = config.MEDIA_BASE_URL,
        stream_base_url: str = config.STREAM_BASE_URL,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.store = store
        self.event_sink = event_sink
        self.usage_meter = usage_meter or UsageMeter(recordings_dir, config.UPLINK_MBPS)
        self.single_active_recording = single_active_recording
        self.recordings_dir = recordings_dir.rstrip("/")
        self.media_base_url = media_base_url.rstrip("/")
        self.stream_base_url = stream_base_url.rstrip("/")
        self.clock = clock

    async def _emit(self, event: CCTVEvent) -> CCTVEvent:
        saved = await self.store.save_event(event)
        if self.event_sink is not None:
            try:
                await maybe_await(self.event_sink(saved.model_copy(deep=True)))
            except Exception as e:
                print(f"[REGISTRY] Event sink failed for {saved.id}: {e}")
        return saved

    # ==================== Cameras ====================

    async def list_cameras(self) -> List[Camera]:
        return await self.store.list_cameras()

    async def get_camera(self, camera_id: str) -> Optional[Camera]:
        return await self.store.get_camera(camera_id)

    async def create_camera(self, data: CameraData) -> Optional[Camera]:
        request = _parse(CameraCreate, data)
        if request is None:
            return None

        camera_id = request.id or _new_id("cam")
        if await self.store.get_camera(camera_id):
            print(f"[REGISTRY] Camera {camera_id} already exists")
            return None

        now = self.clock()
        fields = request.model_dump(exclude={"id", "zone_ids"})
        camera = Camera(id=camera_id, created_at=now, updated_at=now, **fields)
        if camera.type == CameraType.ptz:
            camera.ptz_position = PTZPosition()

        camera.zone_ids = await self._link_camera(camera_id, [], request.zone_ids)
        saved = await self.store.save_camera(camera)
        print(f"[REGISTRY] Created camera {camera_id} ({camera.name})")
        return saved

    async def update_camera(self, camera_id: str, updates: CameraChanges) -> Optional[Camera]:
        request = _parse(CameraUpdate, updates)
        if request is None:
            return None

        camera = await self.store.get_camera(camera_id)
        if camera is None:
            print(f"[REGISTRY] Camera {camera_id} not found")
            return None

        fields = request.model_dump(exclude_unset=True)
        # Explicit nulls on required attributes are ignored
        fields = {
            k: v for k, v in fields.items()
            if v is not None or k in ("stream_url", "thumbnail_url", "last_ping")
        }
        previous_status = camera.status
        new_zone_ids = fields.pop("zone_ids", None)

        updated = camera.model_copy(update=fields)
        if new_zone_ids is not None:
            updated.zone_ids = await self._link_camera(camera_id, camera.zone_ids, new_zone_ids)
        if updated.type == CameraType.ptz and updated.ptz_position is None:
            updated.ptz_position = PTZPosition()
        elif updated.type != CameraType.ptz:
            updated.ptz_position = None
        updated.updated_at = self.clock()

        saved = await self.store.save_camera(updated)

        if previous_status == CameraStatus.online and saved.status == CameraStatus.offline:
            print(f"[REGISTRY] Camera {camera_id} went offline")
            await self._emit(CCTVEvent(
                camera_id=saved.id,
                camera_name=saved.name,
                event_type=EventType.CAMERA_OFFLINE,
                severity=Severity.CRITICAL,
                timestamp=saved.updated_at,
            ))
        return saved

    async def delete_camera(self, camera_id: str) -> bool:
        camera = await self.store.get_camera(camera_id)
        if camera is None:
            return False

        await self._link_camera(camera_id, camera.zone_ids, [])
        # Sweep zones that reference the camera without a back link
        for zone in await self.store.list_zones():
            if camera_id in zone.camera_ids:
                zone.camera_ids = [c for c in zone.camera_ids if c != camera_id]
                zone.updated_at = self.clock()
                await self.store.save_zone(zone)

        now = self.clock()
        for recording in await self.store.list_recordings(camera_id):
            if recording.is_active:
                self._finalize(recording, now, RecordingStatus.FAILED, camera.resolution)
                await self.store.save_recording(recording)

        deleted = await self.store.delete_camera(camera_id)
        if deleted:
            print(f"[REGISTRY] Deleted camera {camera_id}")
        return deleted

    async def _link_camera(
        self, camera_id: str, old_zone_ids: List[str], new_zone_ids: List[str]
    ) -> List[str]:
        """Mirror a camera's zone list onto the zones. Returns the known zone ids."""
        zones = {z.id: z for z in await self.store.list_zones()}
        wanted = []
        for zone_id in dict.fromkeys(new_zone_ids):
            if zone_id in zones:
                wanted.append(zone_id)
            else:
                print(f"[REGISTRY] Ignoring unknown zone {zone_id} for camera {camera_id}")

        now = self.clock()
        for zone_id in set(old_zone_ids) - set(wanted):
            zone = zones.get(zone_id)
            if zone and camera_id in zone.camera_ids:
                zone.camera_ids = [c for c in zone.camera_ids if c != camera_id]
                zone.updated_at = now
                await self.store.save_zone(zone)
        for zone_id in wanted:
            zone = zones[zone_id]
            if camera_id not in zone.camera_ids:
                zone.camera_ids.append(camera_id)
                zone.updated_at = now
                await self.store.save_zone(zone)
        return wanted

    # ==================== Zones ====================

    async def list_zones(self) -> List[GeofenceZone]:
        return await self.store.list_zones()

    async def get_zone(self, zone_id: str) -> Optional[GeofenceZone]:
        return await self.store.get_zone(zone_id)

    async def create_zone(self, data: ZoneData) -> Optional[GeofenceZone]:
        request = _parse(GeofenceZoneCreate, data)
        if request is None:
            return None

        zone_id = request.id or _new_id("zone")
        if await self.store.get_zone(zone_id):
            print(f"[REGISTRY] Zone {zone_id} already exists")
            return None

        now = self.clock()
        fields = request.model_dump(exclude={"id", "camera_ids"})
        zone = GeofenceZone(id=zone_id, created_at=now, updated_at=now, **fields)
        zone.camera_ids = await self._link_zone(zone_id, [], request.camera_ids)
        saved = await self.store.save_zone(zone)
        print(f"[REGISTRY] Created zone {zone_id} ({zone.name})")
        return saved

    async def update_zone(self, zone_id: str, updates: ZoneChanges) -> Optional[GeofenceZone]:
        request = _parse(GeofenceZoneUpdate, updates)
        if request is None:
            return None

        zone = await self.store.get_zone(zone_id)
        if zone is None:
            print(f"[REGISTRY] Zone {zone_id} not found")
            return None

        fields = request.model_dump(exclude_unset=True)
        fields = {
            k: v for k, v in fields.items()
            if v is not None or k in ("description", "center", "radius", "schedule")
        }
        new_camera_ids = fields.pop("camera_ids", None)

        # Re-validate so nested models come back as schema objects
        merged = zone.model_dump()
        merged.update(fields)
        updated = GeofenceZone.model_validate(merged)
        if new_camera_ids is not None:
            updated.camera_ids = await self._link_zone(zone_id, zone.camera_ids, new_camera_ids)
        updated.updated_at = self.clock()
        return await self.store.save_zone(updated)

    async def delete_zone(self, zone_id: str) -> bool:
        zone = await self.store.get_zone(zone_id)
        if zone is None:
            return False

        await self._link_zone(zone_id, zone.camera_ids, [])
        for camera in await self.store.list_cameras():
            if zone_id in camera.zone_ids:
                camera.zone_ids = [z for z in camera.zone_ids if z != zone_id]
                camera.updated_at = self.clock()
                await self.store.save_camera(camera)

        deleted = await self.store.delete_zone(zone_id)
        if deleted:
            print(f"[REGISTRY] Deleted zone {zone_id}")
        return deleted

    async def _link_zone(
        self, zone_id: str, old_camera_ids: List[str], new_camera_ids: List[str]
    ) -> List[str]:
        """Mirror a zone's camera list onto the cameras. Returns the known camera ids."""
        cameras = {c.id: c for c in await self.store.list_cameras()}
        wanted = []
        for camera_id in dict.fromkeys(new_camera_ids):
            if camera_id in cameras:
                wanted.append(camera_id)
            else:
                print(f"[REGISTRY] Ignoring unknown camera {camera_id} for zone {zone_id}")

        now = self.clock()
        for camera_id in set(old_camera_ids) - set(wanted):
            camera = cameras.get(camera_id)
            if camera and zone_id in camera.zone_ids:
                camera.zone_ids = [z for z in camera.zone_ids if z != zone_id]
                camera.updated_at = now
                await self.store.save_camera(camera)
        for camera_id in wanted:
            camera = cameras[camera_id]
            if zone_id not in camera.zone_ids:
                camera.zone_ids.append(zone_id)
                camera.updated_at = now
                await self.store.save_camera(camera)
        return wanted

    # ==================== Events ====================

    async def list_events(
        self,
        limit: int = 100,
        camera_id: Optional[str] = None,
        severity: Optional[Severity] = None,
        acknowledged: Optional[bool] = None,
    ) -> List[CCTVEvent]:
        if limit <= 0:
            return []
        return await self.store.list_events(
            limit=limit,
            camera_id=camera_id,
            severity=severity,
            acknowledged=acknowledged,
        )

    async def get_event(self, event_id: str) -> Optional[CCTVEvent]:
        return await self.store.get_event(event_id)

    async def record_event(self, event: CCTVEvent) -> Optional[CCTVEvent]:
        if await self.store.get_event(event.id):
            print(f"[REGISTRY] Event {event.id} already recorded")
            return None
        return await self.store.save_event(event)

    async def acknowledge_event(self, event_id: str, actor: str) -> bool:
        event = await self.store.get_event(event_id)
        if event is None:
            print(f"[REGISTRY] Event {event_id} not found")
            return False
        if event.acknowledged:
            return True

        event.acknowledged = True
        event.acknowledged_by = actor
        event.acknowledged_at = self.clock()
        await self.store.save_event(event)
        print(f"[REGISTRY] Event {event_id} acknowledged by {actor}")
        return True

    # ==================== Recordings ====================

    def _storage_location(self, camera_id: str, started: datetime) -> str:
        return (
            f"{self.recordings_dir}/{started:%Y}/{started:%m}/"
            f"{camera_id}-{started:%Y%m%d-%H%M%S}.mp4"
        )

    def _finalize(
        self,
        recording: RecordingSession,
        end_time: datetime,
        status: RecordingStatus,
        resolution: Resolution = Resolution.FULL_HD,
    ) -> None:
        end_time = max(end_time, recording.start_time)
        recording.end_time = end_time
        recording.duration = (end_time - recording.start_time).total_seconds()
        recording.status = status
        if status == RecordingStatus.COMPLETED:
            bitrate = BITRATE_MBPS.get(resolution, 4.0)
            recording.file_size = int(recording.duration * bitrate * 1_000_000 / 8)
            recording.video_url = f"{self.media_base_url}/recordings/{recording.id}.mp4"

    async def _finalize_expired(self, recordings: List[RecordingSession]) -> None:
        """Complete sessions whose requested duration has elapsed."""
        now = self.clock()
        resolutions: Dict[str, Resolution] = {}
        for recording in recordings:
            if not recording.is_active or not recording.max_duration:
                continue
            deadline = recording.start_time + timedelta(seconds=recording.max_duration)
            if deadline > now:
                continue
            if recording.camera_id not in resolutions:
                camera = await self.store.get_camera(recording.camera_id)
                resolutions[recording.camera_id] = camera.resolution if camera else Resolution.FULL_HD
            self._finalize(
                recording, deadline, RecordingStatus.COMPLETED, resolutions[recording.camera_id]
            )
            await self.store.save_recording(recording)
            print(f"[REGISTRY] Recording {recording.id} reached its duration")

    async def start_recording(
        self,
        camera_id: str,
        trigger_type: Union[TriggerType, str] = TriggerType.MANUAL,
        duration: Optional[float] = None,
    ) -> Optional[RecordingSession]:
        camera = await self.store.get_camera(camera_id)
        if camera is None:
            print(f"[REGISTRY] Cannot record: camera {camera_id} not found")
            return None
        try:
            trigger = TriggerType(trigger_type)
        except ValueError:
            print(f"[REGISTRY] Unknown trigger type: {trigger_type}")
            return None
        if duration is not None and duration <= 0:
            print(f"[REGISTRY] Invalid recording duration: {duration}")
            return None

        existing = await self.store.list_recordings(camera_id)
        await self._finalize_expired(existing)
        if self.single_active_recording:
            active = [r for r in existing if r.is_active]
            if active:
                print(f"[REGISTRY] Camera {camera_id} already recording ({active[0].id})")
                return None

        now = self.clock()
        recording = RecordingSession(
            id=_new_id("rec"),
            camera_id=camera.id,
            camera_name=camera.name,
            start_time=now,
            max_duration=duration,
            storage_location=self._storage_location(camera.id, now),
            trigger_type=trigger,
            status=RecordingStatus.RECORDING,
            thumbnail_url=camera.thumbnail_url,
        )
        saved = await self.store.save_recording(recording)
        print(f"[REGISTRY] Recording {saved.id} started on {camera_id} ({trigger.value})")

        zone = await self.store.get_zone(camera.zone_ids[0]) if camera.zone_ids else None
        await self._emit(CCTVEvent(
            camera_id=camera.id,
            camera_name=camera.name,
            zone_id=zone.id if zone else None,
            zone_name=zone.name if zone else None,
            event_type=EventType.RECORDING_STARTED,
            severity=Severity.INFO,
            timestamp=now,
            metadata=EventMetadata(recording_duration=duration),
        ))
        return saved

    async def stop_recording(self, recording_id: str) -> bool:
        recording = await self.store.get_recording(recording_id)
        if recording is None:
            print(f"[REGISTRY] Recording {recording_id} not found")
            return False
        await self._finalize_expired([recording])
        if not recording.is_active:
            print(f"[REGISTRY] Recording {recording_id} already {recording.status.value}")
            return False

        camera = await self.store.get_camera(recording.camera_id)
        resolution = camera.resolution if camera else Resolution.FULL_HD
        self._finalize(recording, self.clock(), RecordingStatus.COMPLETED, resolution)
        await self.store.save_recording(recording)
        print(f"[REGISTRY] Recording {recording_id} stopped after {recording.duration:.1f}s")
        return True

    async def list_recordings(self, camera_id: Optional[str] = None) -> List[RecordingSession]:
        recordings = await self.store.list_recordings(camera_id)
        await self._finalize_expired(recordings)
        return [r.model_copy(deep=True) for r in recordings]

    async def get_recording(self, recording_id: str) -> Optional[RecordingSession]:
        recording = await self.store.get_recording(recording_id)
        if recording is not None:
            await self._finalize_expired([recording])
        return recording

    # ==================== Camera commands ====================

    async def control_ptz(
        self,
        camera_id: str,
        command: Union[PTZCommand, str],
        value: Optional[float] = None,
    ) -> bool:
        camera = await self.store.get_camera(camera_id)
        if camera is None:
            return False
        try:
            command = PTZCommand(command)
        except ValueError:
            print(f"[REGISTRY] Unknown PTZ command: {command}")
            return False
        if camera.type != CameraType.ptz:
            print(f"[REGISTRY] PTZ {command.value} ignored: {camera_id} is a {camera.type.value} camera")
            return False

        position = camera.ptz_position or PTZPosition()
        if command == PTZCommand.PRESET:
            if value is None or value < 0:
                print(f"[REGISTRY] PTZ preset on {camera_id} needs a preset number")
                return False
            position.preset = int(value)
        else:
            if value is not None and value <= 0:
                print(f"[REGISTRY] PTZ step must be positive, got {value}")
                return False
            if command in (PTZCommand.PAN_LEFT, PTZCommand.PAN_RIGHT):
                step = value if value is not None else DEFAULT_PTZ_STEP["pan"]
                sign = -1 if command == PTZCommand.PAN_LEFT else 1
                position.pan = _clamp(position.pan + sign * step, -PAN_LIMIT, PAN_LIMIT)
            elif command in (PTZCommand.TILT_UP, PTZCommand.TILT_DOWN):
                step = value if value is not None else DEFAULT_PTZ_STEP["tilt"]
                sign = 1 if command == PTZCommand.TILT_UP else -1
                position.tilt = _clamp(position.tilt + sign * step, -TILT_LIMIT, TILT_LIMIT)
            else:
                step = value if value is not None else DEFAULT_PTZ_STEP["zoom"]
                sign = 1 if command == PTZCommand.ZOOM_IN else -1
                position.zoom = _clamp(position.zoom + sign * step, ZOOM_MIN, ZOOM_MAX)
            position.preset = None

        camera.ptz_position = position
        camera.updated_at = self.clock()
        await self.store.save_camera(camera)
        return True

    async def take_screenshot(self, camera_id: str) -> Optional[str]:
        camera = await self.store.get_camera(camera_id)
        if camera is None:
            return None
        if camera.status != CameraStatus.online:
            print(f"[REGISTRY] Screenshot skipped: {camera_id} is {camera.status.value}")
            return None
        now = self.clock()
        return f"{self.media_base_url}/screenshots/{camera_id}/{now:%Y%m%d-%H%M%S}.jpg"

    async def enable_motion_detection(self, camera_id: str, sensitivity: int = 50) -> bool:
        if sensitivity is None or not 0 <= sensitivity <= 100:
            print(f"[REGISTRY] Motion sensitivity must be 0-100, got {sensitivity}")
            return False
        camera = await self.store.get_camera(camera_id)
        if camera is None:
            return False
        camera.has_motion_detection = True
        camera.motion_sensitivity = int(sensitivity)
        camera.updated_at = self.clock()
        await self.store.save_camera(camera)
        return True

    async def disable_motion_detection(self, camera_id: str) -> bool:
        camera = await self.store.get_camera(camera_id)
        if camera is None:
            return False
        camera.has_motion_detection = False
        camera.updated_at = self.clock()
        await self.store.save_camera(camera)
        return True

    # ==================== System ====================

    async def get_system_health(self) -> SystemHealth:
        cameras = await self.store.list_cameras()
        zones = await self.store.list_zones()
        recordings = await self.store.list_recordings()
        await self._finalize_expired(recordings)

        storage, bandwidth = self.usage_meter(cameras)
        return SystemHealth(
            total_cameras=len(cameras),
            online_cameras=sum(1 for c in cameras if c.status == CameraStatus.online),
            recording_cameras=len({r.camera_id for r in recordings if r.is_active}),
            active_zones=sum(1 for z in zones if z.is_active),
            storage_usage=_clamp(storage, 0.0, 100.0),
            bandwidth_usage=_clamp(bandwidth, 0.0, 100.0),
        )

    async def close(self) -> None:
        await self.store.close()
