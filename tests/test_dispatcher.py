"""Tests for the event dispatcher, driven by a virtual clock."""

import random

import pytest

from guardwatch.core import EventDispatcher, EventSynthesizer
from guardwatch.core.deduplication import BreachDeduplicator
from guardwatch.shared.db.models import EventType, RecordingStatus, Severity, TriggerType
from guardwatch.shared.schemas import CCTVEvent

from .conftest import Clock

INSIDE_ZONE_001 = {"latitude": 40.7128, "longitude": -74.0060}
INSIDE_ZONE_002 = {"latitude": 40.7135, "longitude": -74.0055}


class FixedSynthesizer:
    """Emits a fresh event with the configured severities, in turn."""

    def __init__(self, *severities):
        self.severities = list(severities) or [Severity.INFO]
        self.calls = 0

    async def synthesize(self) -> CCTVEvent:
        severity = self.severities[self.calls % len(self.severities)]
        self.calls += 1
        return CCTVEvent(
            camera_id="cam-001",
            camera_name="Main Entrance",
            event_type=EventType.MOTION_DETECTED,
            severity=severity,
        )


def make_dispatcher(virtual_sleep, **kwargs) -> EventDispatcher:
    kwargs.setdefault("interval", 5)
    kwargs.setdefault("probability", 1.0)
    kwargs.setdefault("rng", random.Random(7))
    return EventDispatcher(sleep=virtual_sleep.sleep, **kwargs)


class TestPolling:
    async def test_one_event_per_interval(self, virtual_sleep):
        dispatcher = make_dispatcher(virtual_sleep)
        received = []
        dispatcher.subscribe(received.append)

        await virtual_sleep.advance(15)

        assert len(received) == 3
        await dispatcher.close()

    async def test_events_recorded_in_registry(self, registry, virtual_sleep):
        dispatcher = make_dispatcher(virtual_sleep, registry=registry)
        before = len(await registry.list_events())
        received = []
        dispatcher.subscribe(received.append)

        await virtual_sleep.advance(10)

        assert len(received) == 2
        assert len(await registry.list_events()) == before + 2
        for event in received:
            assert await registry.get_event(event.id) is not None
        await dispatcher.close()

    async def test_zero_probability_emits_nothing(self, virtual_sleep):
        dispatcher = make_dispatcher(virtual_sleep, probability=0.0)
        received = []
        dispatcher.subscribe(received.append)

        await virtual_sleep.advance(60)

        assert received == []
        await dispatcher.close()

    async def test_probability_is_clamped(self):
        assert EventDispatcher(probability=3.0).probability == 1.0
        assert EventDispatcher(probability=-1.0).probability == 0.0

    async def test_synthesized_events_reach_every_subscriber(self, virtual_sleep):
        alerts = []
        dispatcher = make_dispatcher(
            virtual_sleep,
            synthesizer=FixedSynthesizer(Severity.CRITICAL),
            alert_handler=alerts.append,
        )
        first, second = [], []
        dispatcher.subscribe(first.append)
        dispatcher.subscribe(second.append)

        await virtual_sleep.advance(5)

        # One event per subscription timer, each fanned out to both
        assert len(first) == 2
        assert [e.id for e in first] == [e.id for e in second]
        assert [a.id for a in alerts] == [e.id for e in first]
        await dispatcher.close()

    async def test_synthesized_events_go_to_relay(self, registry, virtual_sleep):
        relayed = []
        dispatcher = make_dispatcher(virtual_sleep, registry=registry, relay=relayed.append)
        received = []
        dispatcher.subscribe(received.append)

        await virtual_sleep.advance(10)

        assert [e.id for e in relayed] == [e.id for e in received]
        assert len(relayed) == 2
        await dispatcher.close()

    async def test_unsubscribe_stops_delivery(self, virtual_sleep):
        dispatcher = make_dispatcher(virtual_sleep)
        received = []
        subscription = dispatcher.subscribe(received.append)

        await virtual_sleep.advance(5)
        subscription()
        await virtual_sleep.advance(30)

        assert len(received) == 1
        assert dispatcher.subscriber_count == 0

        # Second cancel is a no-op
        subscription.cancel()
        assert subscription.active is False

    async def test_callback_error_does_not_stop_polling(self, virtual_sleep):
        dispatcher = make_dispatcher(virtual_sleep)
        calls = []

        def flaky(event):
            calls.append(event)
            raise RuntimeError("dashboard went away")

        dispatcher.subscribe(flaky)
        await virtual_sleep.advance(15)

        assert len(calls) == 3
        await dispatcher.close()

    async def test_async_callbacks_are_awaited(self, virtual_sleep):
        dispatcher = make_dispatcher(virtual_sleep)
        received = []

        async def callback(event):
            received.append(event)

        dispatcher.subscribe(callback)
        await virtual_sleep.advance(5)

        assert len(received) == 1
        await dispatcher.close()

    async def test_close_cancels_everything(self, virtual_sleep):
        dispatcher = make_dispatcher(virtual_sleep)
        subscriptions = [dispatcher.subscribe(lambda e: None) for _ in range(3)]

        await dispatcher.close()

        assert dispatcher.subscriber_count == 0
        assert all(not s.active for s in subscriptions)
        assert all(s.task.done() for s in subscriptions)


class TestAlerts:
    async def test_only_critical_events_alert(self, virtual_sleep):
        alerts = []
        dispatcher = make_dispatcher(
            virtual_sleep,
            synthesizer=FixedSynthesizer(Severity.INFO, Severity.CRITICAL, Severity.WARNING),
            alert_handler=alerts.append,
        )
        received = []
        dispatcher.subscribe(received.append)

        await virtual_sleep.advance(15)

        assert [e.severity for e in received] == [
            Severity.INFO,
            Severity.CRITICAL,
            Severity.WARNING,
        ]
        assert len(alerts) == 1
        assert alerts[0].id == received[1].id
        await dispatcher.close()

    async def test_alert_handler_failure_is_contained(self, virtual_sleep):
        def broken(event):
            raise RuntimeError("pager down")

        dispatcher = make_dispatcher(
            virtual_sleep,
            synthesizer=FixedSynthesizer(Severity.CRITICAL),
            alert_handler=broken,
        )
        received = []
        dispatcher.subscribe(received.append)

        await virtual_sleep.advance(10)

        assert len(received) == 2
        await dispatcher.close()


class TestPublish:
    async def test_delivers_in_registration_order_and_alerts_once(self, virtual_sleep):
        alerts = []
        dispatcher = make_dispatcher(virtual_sleep, probability=0.0, alert_handler=alerts.append)
        order = []
        dispatcher.subscribe(lambda e: order.append("first"))
        dispatcher.subscribe(lambda e: order.append("second"))

        event = CCTVEvent(
            camera_id="cam-002",
            camera_name="Parking Lot North",
            event_type=EventType.CAMERA_OFFLINE,
            severity=Severity.CRITICAL,
        )
        assert await dispatcher.publish(event) == 2

        assert order == ["first", "second"]
        assert len(alerts) == 1
        await dispatcher.close()

    async def test_subscribers_get_copies(self, virtual_sleep):
        dispatcher = make_dispatcher(virtual_sleep, probability=0.0)

        def mutate(event):
            event.camera_name = "Tampered"

        received = []
        dispatcher.subscribe(mutate)
        dispatcher.subscribe(received.append)

        event = CCTVEvent(camera_id="cam-001", camera_name="Main Entrance",
                          event_type=EventType.ALERT_TRIGGERED)
        await dispatcher.publish(event)

        assert received[0].camera_name == "Main Entrance"
        assert event.camera_name == "Main Entrance"
        await dispatcher.close()

    async def test_failed_delivery_not_counted(self, virtual_sleep):
        dispatcher = make_dispatcher(virtual_sleep, probability=0.0)

        def broken(event):
            raise RuntimeError("boom")

        dispatcher.subscribe(broken)
        dispatcher.subscribe(lambda e: None)

        event = CCTVEvent(camera_id="cam-001", camera_name="Main Entrance",
                          event_type=EventType.MOTION_DETECTED)
        assert await dispatcher.publish(event) == 1
        await dispatcher.close()

    async def test_relay_gets_published_events_after_subscribers(self, virtual_sleep):
        order = []
        dispatcher = make_dispatcher(
            virtual_sleep, probability=0.0, relay=lambda e: order.append(("relay", e.id))
        )
        dispatcher.subscribe(lambda e: order.append(("subscriber", e.id)))

        event = CCTVEvent(camera_id="cam-001", camera_name="Main Entrance",
                          event_type=EventType.ALERT_TRIGGERED)
        await dispatcher.publish(event)

        assert order == [("subscriber", event.id), ("relay", event.id)]
        await dispatcher.close()

    async def test_relay_failure_does_not_block_delivery(self, virtual_sleep):
        def broken(event):
            raise RuntimeError("redis down")

        dispatcher = make_dispatcher(virtual_sleep, probability=0.0, relay=broken)
        received = []
        dispatcher.subscribe(received.append)

        event = CCTVEvent(camera_id="cam-001", camera_name="Main Entrance",
                          event_type=EventType.MOTION_DETECTED)
        assert await dispatcher.publish(event) == 1
        assert len(received) == 1
        await dispatcher.close()


class TestReportPosition:
    async def test_breach_records_event_and_starts_recording(self, registry, virtual_sleep):
        dispatcher = make_dispatcher(virtual_sleep, registry=registry, probability=0.0)
        received = []
        dispatcher.subscribe(received.append)

        events = await dispatcher.report_position(INSIDE_ZONE_001, "guard-7")

        assert len(events) == 1
        event = events[0]
        assert event.event_type == EventType.ZONE_BREACH
        assert event.severity == Severity.CRITICAL
        assert event.zone_id == "zone-001"
        assert event.camera_id == "cam-001"
        assert event.metadata.object_detected == "guard-7"
        assert await registry.get_event(event.id) is not None
        assert any(e.id == event.id for e in received)

        recordings = await registry.list_recordings("cam-001")
        active = [r for r in recordings if r.status == RecordingStatus.RECORDING]
        assert len(active) == 1
        assert active[0].trigger_type == TriggerType.ZONE_BREACH
        await dispatcher.close()

    async def test_monitoring_zone_is_not_a_breach(self, registry):
        dispatcher = EventDispatcher(registry, probability=0.0)
        zone = await registry.get_zone("zone-002")
        assert zone.type == "monitoring"

        assert await dispatcher.report_position(INSIDE_ZONE_002, "guard-7") == []

    async def test_outside_every_zone(self, registry):
        dispatcher = EventDispatcher(registry, probability=0.0)
        far_away = {"latitude": 51.5, "longitude": -0.12}
        assert await dispatcher.report_position(far_away, "guard-7") == []

    async def test_repeat_reports_are_deduplicated(self, registry):
        dispatcher = EventDispatcher(registry, probability=0.0)

        assert len(await dispatcher.report_position(INSIDE_ZONE_001, "guard-7")) == 1
        assert await dispatcher.report_position(INSIDE_ZONE_001, "guard-7") == []
        assert len(await dispatcher.report_position(INSIDE_ZONE_001, "guard-8")) == 1

    async def test_anonymous_reports_always_emit(self, registry):
        dispatcher = EventDispatcher(registry, probability=0.0)

        first = await dispatcher.report_position(INSIDE_ZONE_001)
        second = await dispatcher.report_position(INSIDE_ZONE_001)

        assert len(first) == len(second) == 1
        assert first[0].metadata.object_detected == "person"

    async def test_without_registry(self):
        assert await EventDispatcher(probability=0.0).report_position(INSIDE_ZONE_001) == []


class TestBreachDeduplicator:
    def test_cooldown_window_extends_while_inside(self):
        clock = Clock()
        dedup = BreachDeduplicator(cooldown_seconds=30, clock=clock)

        create, sig = dedup.should_create_event("guard-1", "zone-001")
        assert create is True
        dedup.register_event(sig, "event-a")

        clock.advance(20)
        assert dedup.should_create_event("guard-1", "zone-001")[0] is False
        clock.advance(20)
        # Still within 30s of the last report
        assert dedup.should_create_event("guard-1", "zone-001")[0] is False
        clock.advance(31)
        assert dedup.should_create_event("guard-1", "zone-001")[0] is True

    def test_cleanup_stale(self):
        clock = Clock()
        dedup = BreachDeduplicator(clock=clock)
        _, sig = dedup.should_create_event("guard-1", "zone-001")
        dedup.register_event(sig, "event-a")
        assert dedup.active_signatures == 1

        clock.advance(301)
        dedup.cleanup_stale()
        assert dedup.active_signatures == 0


class TestSynthesizer:
    async def test_uses_registry_cameras(self, registry):
        synthesizer = EventSynthesizer(registry, rng=random.Random(3))
        camera_ids = {c.id for c in await registry.list_cameras()}

        for _ in range(10):
            event = await synthesizer.synthesize()
            assert event.camera_id in camera_ids
            assert 60 <= event.metadata.confidence <= 99
            assert event.event_type in (
                EventType.MOTION_DETECTED,
                EventType.ZONE_BREACH,
                EventType.CAMERA_OFFLINE,
            )

    async def test_falls_back_without_registry(self):
        event = await EventSynthesizer(rng=random.Random(1)).synthesize()
        assert event.camera_id == "cam-001"
        assert event.zone_id == "zone-001"

    @pytest.mark.parametrize("seed", [1, 2, 3])
    async def test_empty_registry_falls_back(self, empty_registry, seed):
        event = await EventSynthesizer(empty_registry, rng=random.Random(seed)).synthesize()
        assert event.camera_name == "Main Entrance"
