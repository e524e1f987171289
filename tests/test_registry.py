"""Tests for LocalRegistry over the in-memory store."""

from datetime import timedelta

import pytest

from guardwatch.registry import MemoryStore, UsageMeter
from guardwatch.shared.db.models import (
    CameraStatus,
    CameraType,
    EventType,
    PTZCommand,
    RecordingStatus,
    Resolution,
    Severity,
    TriggerType,
)
from guardwatch.shared.schemas import Camera, CameraCreate, CCTVEvent

from .conftest import make_registry


class TestCameras:
    async def test_reads_return_copies(self, registry):
        camera = await registry.get_camera("cam-001")
        camera.name = "Changed"
        camera.zone_ids.append("zone-999")

        again = await registry.get_camera("cam-001")
        assert again.name == "Main Entrance"
        assert again.zone_ids == ["zone-001"]

    async def test_create_assigns_id_and_links_zones(self, registry, clock):
        camera = await registry.create_camera(
            CameraCreate(name="Gate", zone_ids=["zone-002", "zone-404"])
        )

        assert camera.id.startswith("cam-")
        assert camera.created_at == clock()
        assert camera.zone_ids == ["zone-002"]
        zone = await registry.get_zone("zone-002")
        assert camera.id in zone.camera_ids

    async def test_create_ptz_camera_gets_home_position(self, registry):
        camera = await registry.create_camera({"name": "Yard", "type": "ptz"})
        assert camera.ptz_position.pan == 0
        assert camera.ptz_position.zoom == 1

    async def test_create_rejects_duplicate_id(self, registry):
        assert await registry.create_camera({"id": "cam-001", "name": "Dup"}) is None

    async def test_create_rejects_invalid_data(self, registry):
        assert await registry.create_camera({"name": ""}) is None
        assert await registry.create_camera({"name": "X", "latitude": 123}) is None

    async def test_update_merges_partial_fields(self, registry, clock):
        clock.advance(60)
        camera = await registry.update_camera("cam-002", {"name": "Parking North"})

        assert camera.name == "Parking North"
        assert camera.location == "Parking Area - North Section"
        assert camera.updated_at == clock()

    async def test_update_unknown_camera(self, registry):
        assert await registry.update_camera("cam-404", {"name": "X"}) is None

    async def test_going_offline_records_critical_event(self, clock):
        from guardwatch.registry import seeded_store

        published = []
        registry = make_registry(seeded_store(now=clock()), clock, event_sink=published.append)

        await registry.update_camera("cam-001", {"status": "offline"})

        assert len(published) == 1
        event = published[0]
        assert event.event_type == EventType.CAMERA_OFFLINE
        assert event.severity == Severity.CRITICAL
        assert event.camera_id == "cam-001"
        stored = await registry.list_events(camera_id="cam-001", severity=Severity.CRITICAL)
        assert [e.id for e in stored] == [event.id]

    async def test_offline_to_offline_records_nothing(self, registry):
        before = await registry.list_events()
        await registry.update_camera("cam-003", {"status": "offline"})
        assert len(await registry.list_events()) == len(before)

    async def test_update_moves_zone_links(self, registry):
        await registry.update_camera("cam-001", {"zone_ids": ["zone-002"]})

        assert "cam-001" not in (await registry.get_zone("zone-001")).camera_ids
        assert "cam-001" in (await registry.get_zone("zone-002")).camera_ids

    async def test_delete_detaches_from_zones(self, registry):
        assert await registry.delete_camera("cam-001") is True

        assert await registry.get_camera("cam-001") is None
        assert (await registry.get_zone("zone-001")).camera_ids == []
        assert await registry.delete_camera("cam-001") is False

    async def test_delete_fails_active_recording(self, registry):
        recording = await registry.start_recording("cam-002")
        await registry.delete_camera("cam-002")

        stored = await registry.get_recording(recording.id)
        assert stored.status == RecordingStatus.FAILED

    async def test_stream_url(self, registry):
        url = registry.get_stream_url("cam-001", "720p")
        assert url == "https://stream.test/camera/cam-001?quality=720p"


class TestZones:
    async def test_create_links_cameras(self, registry):
        zone = await registry.create_zone({
            "name": "Dock",
            "type": "alert",
            "center": {"latitude": 40.7125, "longitude": -74.0065},
            "radius": 25,
            "camera_ids": ["cam-003", "cam-404"],
        })

        assert zone.camera_ids == ["cam-003"]
        assert zone.id in (await registry.get_camera("cam-003")).zone_ids

    async def test_update_zone(self, registry):
        zone = await registry.update_zone("zone-002", {"is_active": False, "radius": 40})
        assert zone.is_active is False
        assert zone.radius == 40
        assert zone.schedule.enabled is True

    async def test_delete_detaches_from_cameras(self, registry):
        assert await registry.delete_zone("zone-002") is True
        assert (await registry.get_camera("cam-002")).zone_ids == []
        assert await registry.get_zone("zone-002") is None

    async def test_check_point(self, registry):
        point = {"latitude": 40.7128, "longitude": -74.0060}
        assert [z.id for z in await registry.check_point(point)] == ["zone-001"]

        await registry.update_zone("zone-001", {"is_active": False})
        assert await registry.check_point(point) == []


class TestEvents:
    async def test_list_newest_first_with_filters(self, registry):
        events = await registry.list_events()
        assert [e.id for e in events] == ["event-001", "event-002"]

        assert len(await registry.list_events(limit=1)) == 1
        assert await registry.list_events(limit=0) == []
        critical = await registry.list_events(severity=Severity.CRITICAL)
        assert [e.id for e in critical] == ["event-002"]
        open_events = await registry.list_events(acknowledged=False)
        assert [e.id for e in open_events] == ["event-001"]

    async def test_acknowledge_is_idempotent(self, registry, clock):
        assert await registry.acknowledge_event("event-001", "guard-1") is True
        first = await registry.get_event("event-001")
        assert first.acknowledged is True
        assert first.acknowledged_by == "guard-1"
        assert first.acknowledged_at == clock()

        clock.advance(300)
        assert await registry.acknowledge_event("event-001", "supervisor-2") is True
        second = await registry.get_event("event-001")
        assert second.acknowledged_by == "guard-1"
        assert second.acknowledged_at == first.acknowledged_at

    async def test_acknowledge_unknown_event(self, registry):
        assert await registry.acknowledge_event("event-404", "guard-1") is False

    async def test_record_event_rejects_duplicate_id(self, registry):
        event = CCTVEvent(
            camera_id="cam-001",
            camera_name="Main Entrance",
            event_type=EventType.ALERT_TRIGGERED,
        )
        assert (await registry.record_event(event)).id == event.id
        assert await registry.record_event(event) is None


class TestRecordings:
    async def test_start_creates_active_session_and_event(self, registry):
        recording = await registry.start_recording("cam-002")

        assert recording.status == RecordingStatus.RECORDING
        assert recording.trigger_type == TriggerType.MANUAL
        assert recording.camera_name == "Parking Lot North"
        assert recording.storage_location == "data/recordings/2026/01/cam-002-20260115-120000.mp4"

        latest = (await registry.list_events(camera_id="cam-002"))[0]
        assert latest.event_type == EventType.RECORDING_STARTED
        assert latest.severity == Severity.INFO

    async def test_second_start_rejected_while_recording(self, registry):
        first = await registry.start_recording("cam-002")
        assert await registry.start_recording("cam-002") is None

        assert await registry.stop_recording(first.id) is True
        assert await registry.start_recording("cam-002") is not None

    async def test_concurrent_sessions_when_allowed(self, clock):
        from guardwatch.registry import seeded_store

        registry = make_registry(
            seeded_store(now=clock()), clock, single_active_recording=False
        )
        assert await registry.start_recording("cam-002") is not None
        assert await registry.start_recording("cam-002") is not None

    async def test_stop_sets_duration_and_size(self, registry, clock):
        recording = await registry.start_recording("cam-002", TriggerType.INCIDENT)
        clock.advance(90)

        assert await registry.stop_recording(recording.id) is True
        stopped = await registry.get_recording(recording.id)
        assert stopped.status == RecordingStatus.COMPLETED
        assert stopped.end_time >= stopped.start_time
        assert stopped.duration == (stopped.end_time - stopped.start_time).total_seconds() == 90
        # 1080p is estimated at 4 Mbit/s
        assert stopped.file_size == 45_000_000
        assert stopped.video_url == f"https://media.test/recordings/{recording.id}.mp4"

    async def test_stop_terminal_or_unknown(self, registry):
        assert await registry.stop_recording("rec-001") is False
        assert await registry.stop_recording("rec-404") is False

    async def test_start_unknown_camera_or_trigger(self, registry):
        assert await registry.start_recording("cam-404") is None
        assert await registry.start_recording("cam-001", "sometimes") is None
        assert await registry.start_recording("cam-001", duration=0) is None

    async def test_requested_duration_finalizes_on_listing(self, registry, clock):
        recording = await registry.start_recording("cam-001", duration=60)
        clock.advance(120)

        listed = {r.id: r for r in await registry.list_recordings("cam-001")}
        finished = listed[recording.id]
        assert finished.status == RecordingStatus.COMPLETED
        assert finished.duration == 60
        assert finished.end_time == recording.start_time + timedelta(seconds=60)

    async def test_stop_after_requested_duration_keeps_requested_end(self, registry, clock):
        recording = await registry.start_recording("cam-002", duration=60)
        clock.advance(600)

        # Already finished at start + 60s, so there is nothing left to stop
        assert await registry.stop_recording(recording.id) is False
        stopped = await registry.get_recording(recording.id)
        assert stopped.status == RecordingStatus.COMPLETED
        assert stopped.duration == 60
        assert stopped.end_time == recording.start_time + timedelta(seconds=60)

    async def test_list_newest_first(self, registry, clock):
        clock.advance(10)
        recording = await registry.start_recording("cam-001")
        recordings = await registry.list_recordings()
        assert [r.id for r in recordings] == [recording.id, "rec-001"]


class TestCameraCommands:
    async def test_ptz_moves_and_clamps(self, registry):
        assert await registry.control_ptz("cam-003", PTZCommand.PAN_RIGHT, 30) is True
        assert (await registry.get_camera("cam-003")).ptz_position.pan == 30

        assert await registry.control_ptz("cam-003", "pan_left", 500) is True
        assert await registry.control_ptz("cam-003", "zoom_in", 50) is True
        assert await registry.control_ptz("cam-003", "tilt_down") is True

        position = (await registry.get_camera("cam-003")).ptz_position
        assert position.pan == -180
        assert position.zoom == 20
        assert position.tilt == -5

    async def test_ptz_preset(self, registry):
        assert await registry.control_ptz("cam-003", "preset") is False
        assert await registry.control_ptz("cam-003", "preset", 3) is True
        assert (await registry.get_camera("cam-003")).ptz_position.preset == 3

    async def test_ptz_rejected_for_fixed_cameras(self, registry):
        assert await registry.control_ptz("cam-001", "pan_left", 10) is False
        assert (await registry.get_camera("cam-001")).ptz_position is None

    async def test_ptz_unknown_command_or_camera(self, registry):
        assert await registry.control_ptz("cam-003", "spin") is False
        assert await registry.control_ptz("cam-404", "pan_left") is False

    async def test_screenshot(self, registry):
        url = await registry.take_screenshot("cam-001")
        assert url == "https://media.test/screenshots/cam-001/20260115-120000.jpg"
        assert await registry.take_screenshot("cam-003") is None  # offline
        assert await registry.take_screenshot("cam-404") is None

    async def test_motion_detection(self, registry):
        assert await registry.enable_motion_detection("cam-002", 80) is True
        camera = await registry.get_camera("cam-002")
        assert camera.has_motion_detection is True
        assert camera.motion_sensitivity == 80

        assert await registry.disable_motion_detection("cam-002") is True
        assert (await registry.get_camera("cam-002")).has_motion_detection is False

    @pytest.mark.parametrize("sensitivity", [-1, 101])
    async def test_motion_sensitivity_out_of_range(self, registry, sensitivity):
        assert await registry.enable_motion_detection("cam-002", sensitivity) is False
        assert (await registry.get_camera("cam-002")).motion_sensitivity == 50

    async def test_motion_unknown_camera(self, registry):
        assert await registry.enable_motion_detection("cam-404") is False
        assert await registry.disable_motion_detection("cam-404") is False


class TestSystemHealth:
    async def test_counts_and_usage(self, registry):
        health = await registry.get_system_health()
        assert health.total_cameras == 3
        assert health.online_cameras == 2
        assert health.recording_cameras == 0
        assert health.active_zones == 2
        assert health.storage_usage == 42.0
        assert health.bandwidth_usage == 12.5

        await registry.start_recording("cam-001")
        assert (await registry.get_system_health()).recording_cameras == 1

    async def test_empty_registry(self, empty_registry):
        health = await empty_registry.get_system_health()
        assert health.total_cameras == 0
        assert health.active_zones == 0


class TestUsageMeter:
    def test_bandwidth_counts_online_cameras(self):
        meter = UsageMeter("does-not-exist", uplink_mbps=100)
        cameras = [
            Camera(id="a", name="a", status=CameraStatus.online, resolution=Resolution.UHD),
            Camera(id="b", name="b", status=CameraStatus.online, resolution=Resolution.FULL_HD),
            Camera(id="c", name="c", status=CameraStatus.offline, resolution=Resolution.UHD),
        ]
        assert meter.bandwidth_usage(cameras) == 20.0

    def test_bandwidth_caps_at_100(self):
        meter = UsageMeter("does-not-exist", uplink_mbps=10)
        cameras = [Camera(id="a", name="a", status=CameraStatus.online, resolution=Resolution.UHD)]
        assert meter.bandwidth_usage(cameras) == 100.0

    def test_storage_percentage(self, tmp_path):
        storage, _ = UsageMeter(str(tmp_path), uplink_mbps=100)([])
        assert 0.0 <= storage <= 100.0


async def test_memory_store_isolates_saved_objects():
    store = MemoryStore()
    camera = Camera(id="x", name="X", type=CameraType.fixed)
    await store.save_camera(camera)
    camera.name = "Mutated"
    assert (await store.get_camera("x")).name == "X"
