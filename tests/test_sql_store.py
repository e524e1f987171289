"""SqlStore tests on an in-memory SQLite database."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from guardwatch.registry import SqlStore
from guardwatch.registry.fixtures import demo_cameras, demo_events, demo_recordings, demo_zones
from guardwatch.shared.db.models import Base, RecordingStatus, Severity

from .conftest import make_registry


@pytest.fixture
async def store(clock):
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    store = SqlStore(factory)

    now = clock()
    for camera in demo_cameras(now):
        await store.save_camera(camera)
    for zone in demo_zones(now):
        await store.save_zone(zone)
    for event in demo_events(now):
        await store.save_event(event)
    for recording in demo_recordings(now):
        await store.save_recording(recording)

    yield store
    await engine.dispose()


class TestSqlStore:
    async def test_camera_round_trip(self, store):
        camera = await store.get_camera("cam-003")
        assert camera.name == "Loading Dock"
        assert camera.ptz_position.zoom == 1
        assert camera.zone_ids == []

        camera.name = "Dock East"
        await store.save_camera(camera)
        assert (await store.get_camera("cam-003")).name == "Dock East"
        assert len(await store.list_cameras()) == 3

    async def test_zone_round_trip(self, store):
        zone = await store.get_zone("zone-002")
        assert len(zone.coordinates) == 4
        assert zone.schedule.time_ranges[0].start_time == "18:00"
        assert zone.camera_ids == ["cam-002"]

    async def test_delete(self, store):
        assert await store.delete_camera("cam-002") is True
        assert await store.get_camera("cam-002") is None
        assert await store.delete_camera("cam-002") is False

    async def test_event_filters_newest_first(self, store):
        events = await store.list_events()
        assert [e.id for e in events] == ["event-001", "event-002"]
        assert events[0].metadata.confidence == 85

        critical = await store.list_events(severity=Severity.CRITICAL)
        assert [e.id for e in critical] == ["event-002"]
        assert [e.id for e in await store.list_events(acknowledged=False)] == ["event-001"]
        assert [e.id for e in await store.list_events(camera_id="cam-003")] == ["event-002"]
        assert len(await store.list_events(limit=1)) == 1

    async def test_recordings_by_camera(self, store):
        assert [r.id for r in await store.list_recordings("cam-001")] == ["rec-001"]
        assert await store.list_recordings("cam-002") == []
        assert (await store.get_recording("rec-001")).status == RecordingStatus.COMPLETED


class TestRegistryOverSql:
    async def test_acknowledge_persists(self, store, clock):
        registry = make_registry(store, clock)

        assert await registry.acknowledge_event("event-001", "guard-1") is True
        event = await store.get_event("event-001")
        assert event.acknowledged_by == "guard-1"

    async def test_recording_lifecycle(self, store, clock):
        registry = make_registry(store, clock)

        recording = await registry.start_recording("cam-002")
        assert await registry.start_recording("cam-002") is None

        clock.advance(30)
        assert await registry.stop_recording(recording.id) is True
        stopped = await store.get_recording(recording.id)
        assert stopped.status == RecordingStatus.COMPLETED
        assert stopped.duration == 30

    async def test_zone_delete_cascades(self, store, clock):
        registry = make_registry(store, clock)

        assert await registry.delete_zone("zone-001") is True
        assert (await store.get_camera("cam-001")).zone_ids == []
