"""Demo site used to seed the in-memory backend."""

from datetime import datetime, timedelta
from typing import Optional

from ..shared.db.models import (
    CameraStatus,
    CameraType,
    EventType,
    RecordingStatus,
    Resolution,
    Severity,
    TriggerType,
    ZonePriority,
    ZoneType,
)
from ..shared.schemas import (
    AlertSettings,
    Camera,
    CCTVEvent,
    EventMetadata,
    GeofenceZone,
    GeoPoint,
    PTZPosition,
    RecordingSession,
    TimeRange,
    ZoneSchedule,
)
from .stores import MemoryStore


def demo_cameras(now: datetime, stream_base_url: str = "https://demo-stream.example.com"):
    return [
        Camera(
            id="cam-001",
            name="Main Entrance",
            location="Building A - Main Entrance",
            latitude=40.7128,
            longitude=-74.0060,
            status=CameraStatus.online,
            type=CameraType.dome,
            resolution=Resolution.UHD,
            has_audio=True,
            has_night_vision=True,
            has_motion_detection=True,
            motion_sensitivity=50,
            zone_ids=["zone-001"],
            stream_url=f"{stream_base_url}/camera/cam-001",
            last_ping=now,
            created_at=now,
            updated_at=now,
        ),
        Camera(
            id="cam-002",
            name="Parking Lot North",
            location="Parking Area - North Section",
            latitude=40.7135,
            longitude=-74.0055,
            status=CameraStatus.online,
            type=CameraType.bullet,
            resolution=Resolution.FULL_HD,
            has_night_vision=True,
            has_motion_detection=True,
            motion_sensitivity=50,
            zone_ids=["zone-002"],
            stream_url=f"{stream_base_url}/camera/cam-002",
            last_ping=now,
            created_at=now,
            updated_at=now,
        ),
        Camera(
            id="cam-003",
            name="Loading Dock",
            location="Building B - Loading Area",
            latitude=40.7125,
            longitude=-74.0065,
            status=CameraStatus.offline,
            type=CameraType.ptz,
            resolution=Resolution.FULL_HD,
            has_audio=True,
            has_night_vision=True,
            has_motion_detection=True,
            motion_sensitivity=50,
            stream_url=f"{stream_base_url}/camera/cam-003",
            ptz_position=PTZPosition(),
            last_ping=now - timedelta(minutes=15),
            created_at=now,
            updated_at=now,
        ),
    ]


def demo_zones(now: datetime):
    return [
        GeofenceZone(
            id="zone-001",
            name="Main Entrance Restricted Area",
            description="High security zone around main building entrance",
            type=ZoneType.RESTRICTED,
            coordinates=[
                GeoPoint(latitude=40.7127, longitude=-74.0061),
                GeoPoint(latitude=40.7129, longitude=-74.0061),
                GeoPoint(latitude=40.7129, longitude=-74.0059),
                GeoPoint(latitude=40.7127, longitude=-74.0059),
            ],
            center=GeoPoint(latitude=40.7128, longitude=-74.0060),
            priority=ZonePriority.CRITICAL,
            camera_ids=["cam-001"],
            auto_recording=True,
            alert_settings=AlertSettings(
                notify_guards=True,
                notify_supervisors=True,
                sound_alarm=True,
                auto_lockdown=True,
            ),
            created_at=now,
            updated_at=now,
        ),
        GeofenceZone(
            id="zone-002",
            name="Parking Monitoring Zone",
            description="General monitoring area for parking lot",
            type=ZoneType.MONITORING,
            coordinates=[
                GeoPoint(latitude=40.7133, longitude=-74.0057),
                GeoPoint(latitude=40.7137, longitude=-74.0057),
                GeoPoint(latitude=40.7137, longitude=-74.0053),
                GeoPoint(latitude=40.7133, longitude=-74.0053),
            ],
            center=GeoPoint(latitude=40.7135, longitude=-74.0055),
            priority=ZonePriority.MEDIUM,
            camera_ids=["cam-002"],
            schedule=ZoneSchedule(
                enabled=True,
                time_ranges=[
                    TimeRange(
                        start_time="18:00",
                        end_time="06:00",
                        days=["monday", "tuesday", "wednesday", "thursday", "friday"],
                    )
                ],
            ),
            created_at=now,
            updated_at=now,
        ),
    ]


def demo_events(now: datetime):
    return [
        CCTVEvent(
            id="event-001",
            camera_id="cam-001",
            camera_name="Main Entrance",
            zone_id="zone-001",
            zone_name="Main Entrance Restricted Area",
            event_type=EventType.MOTION_DETECTED,
            severity=Severity.WARNING,
            timestamp=now - timedelta(minutes=5),
            metadata=EventMetadata(confidence=85, object_detected="person"),
        ),
        CCTVEvent(
            id="event-002",
            camera_id="cam-003",
            camera_name="Loading Dock",
            event_type=EventType.CAMERA_OFFLINE,
            severity=Severity.CRITICAL,
            timestamp=now - timedelta(minutes=15),
            acknowledged=True,
            acknowledged_by="supervisor-001",
            acknowledged_at=now - timedelta(minutes=10),
        ),
    ]


def demo_recordings(now: datetime, recordings_dir: str = "data/recordings"):
    start = now - timedelta(hours=1)
    return [
        RecordingSession(
            id="rec-001",
            camera_id="cam-001",
            camera_name="Main Entrance",
            start_time=start,
            end_time=start + timedelta(minutes=15),
            duration=900.0,
            file_size=245_760_000,
            storage_location=f"{recordings_dir}/{start:%Y}/{start:%m}/cam-001-{start:%Y%m%d-%H%M%S}.mp4",
            trigger_type=TriggerType.MOTION,
            status=RecordingStatus.COMPLETED,
        ),
    ]


def seeded_store(
    now: Optional[datetime] = None,
    stream_base_url: str = "https://demo-stream.example.com",
    recordings_dir: str = "data/recordings",
) -> MemoryStore:
    """MemoryStore holding the demo site: three cameras, two zones, two events, one recording."""
    now = now or datetime.utcnow()
    return MemoryStore(
        cameras=demo_cameras(now, stream_base_url),
        zones=demo_zones(now),
        events=demo_events(now),
        recordings=demo_recordings(now, recordings_dir),
    )
