"""Event stream dispatcher for CCTV dashboards."""

import asyncio
import random
from typing import Any, Awaitable, Callable, List, Optional

from ..config import config
from ..registry.base import CCTVRegistry
from ..shared.aio import maybe_await
from ..shared.db.models import EventType, Severity, TriggerType, ZonePriority, ZoneType
from ..shared.schemas import CCTVEvent, EventMetadata
from .deduplication import BreachDeduplicator
from .synthesizer import EventSynthesizer

EventCallback = Callable[[CCTVEvent], Any]

# Zone types whose entry is a breach rather than plain monitoring
BREACH_ZONE_TYPES = (ZoneType.RESTRICTED, ZoneType.ALERT, ZoneType.EMERGENCY)

PRIORITY_SEVERITY = {
    ZonePriority.CRITICAL: Severity.CRITICAL,
    ZonePriority.HIGH: Severity.CRITICAL,
    ZonePriority.MEDIUM: Severity.WARNING,
    ZonePriority.LOW: Severity.INFO,
}


class Subscription:
    """
    Handle for one subscriber and its polling task.

    Calling the handle (or ``cancel()``) stops that subscription only.
    Cancelling twice is a no-op.
    """

    def __init__(self, dispatcher: "EventDispatcher", callback: EventCallback):
        self._dispatcher = dispatcher
        self.callback = callback
        self.active = True
        self.task: Optional[asyncio.Task] = None

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        if self.task is not None and not self.task.done():
            self.task.cancel()
        self._dispatcher._remove(self)

    def __call__(self) -> None:
        self.cancel()


class EventDispatcher:
    """
    Delivers CCTV events to subscribers.

    Each subscription runs its own polling task: every ``interval`` seconds,
    with probability ``probability``, an event is synthesized, recorded in the
    registry (when attached) and fanned out through ``publish``. Every event,
    synthesized or externally triggered, reaches each active subscriber in
    registration order, then the optional ``relay`` (e.g. Redis). Critical
    events also go to the alert handler, once per event.

    ``sleep`` and ``rng`` are injectable so tests can drive a virtual clock.
    """

    def __init__(
        self,
        registry: Optional[CCTVRegistry] = None,
        interval: float = config.EVENT_INTERVAL_SECONDS,
        probability: float = config.EVENT_PROBABILITY,
        alert_handler: Optional[EventCallback] = None,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        synthesizer: Optional[EventSynthesizer] = None,
        breach_cooldown: float = config.BREACH_COOLDOWN_SECONDS,
        relay: Optional[EventCallback] = None,
    ):
        self.registry = registry
        self.interval = interval
        self.probability = max(0.0, min(1.0, probability))
        self.alert_handler = alert_handler
        self.relay = relay
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._synthesizer = synthesizer or EventSynthesizer(registry, rng=self._rng)
        self._deduplicator = BreachDeduplicator(cooldown_seconds=breach_cooldown)
        self._subscriptions: List[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, callback: EventCallback) -> Subscription:
        """
        Register a callback and start its polling task.

        Must be called from a running event loop. Subscribing the same callback
        twice creates two independent subscriptions.
        """
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        subscription.task = asyncio.get_running_loop().create_task(self._poll(subscription))
        print(f"[DISPATCHER] Subscriber added ({self.subscriber_count} active)")
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
            print(f"[DISPATCHER] Subscriber removed ({self.subscriber_count} active)")

    async def _poll(self, subscription: Subscription) -> None:
        while subscription.active:
            await self._sleep(self.interval)
            if not subscription.active:
                break
            if self._rng.random() >= self.probability:
                continue

            try:
                event = await self._synthesizer.synthesize()
                if self.registry is not None:
                    recorded = await self.registry.record_event(event)
                    if recorded is not None:
                        event = recorded
            except Exception as e:
                print(f"[DISPATCHER] Event synthesis failed: {e}")
                continue

            await self.publish(event)

    async def _deliver(self, subscription: Subscription, event: CCTVEvent) -> bool:
        try:
            await maybe_await(subscription.callback(event.model_copy(deep=True)))
            return True
        except Exception as e:
            print(f"[DISPATCHER] Subscriber callback failed for {event.id}: {e}")
            return False

    @staticmethod
    def should_alert(event: CCTVEvent) -> bool:
        """Only critical events raise alerts."""
        return event.severity == Severity.CRITICAL

    async def _alert(self, event: CCTVEvent) -> None:
        if not self.should_alert(event):
            return
        print(f"[DISPATCHER] ALERT: {event.message}")
        if self.alert_handler is None:
            return
        try:
            await maybe_await(self.alert_handler(event.model_copy(deep=True)))
        except Exception as e:
            print(f"[DISPATCHER] Alert handler failed for {event.id}: {e}")

    async def publish(self, event: CCTVEvent) -> int:
        """
        Deliver an event to every active subscriber, then to the relay.

        Subscribers are called in registration order. Returns the number of
        subscribers that received the event.
        """
        delivered = 0
        for subscription in list(self._subscriptions):
            if subscription.active and await self._deliver(subscription, event):
                delivered += 1
        await self._alert(event)
        if self.relay is not None:
            try:
                await maybe_await(self.relay(event.model_copy(deep=True)))
            except Exception as e:
                print(f"[DISPATCHER] Relay failed for {event.id}: {e}")
        return delivered

    async def report_position(self, point: Any, subject: Optional[str] = None) -> List[CCTVEvent]:
        """
        Evaluate a position report against the active geofence zones.

        Emits a zone_breach event for every restricted, alert or emergency zone
        containing the point and starts zone_breach recordings on the zone's
        cameras when the zone has auto_recording set.

        Returns:
            The breach events emitted
        """
        if self.registry is None:
            return []

        events = []
        for zone in await self.registry.check_point(point):
            if zone.type not in BREACH_ZONE_TYPES:
                continue

            should_create, sig_hash = self._deduplicator.should_create_event(subject, zone.id)
            if not should_create:
                continue

            camera = None
            for camera_id in zone.camera_ids:
                camera = await self.registry.get_camera(camera_id)
                if camera is not None:
                    break

            event = CCTVEvent(
                camera_id=camera.id if camera else "",
                camera_name=camera.name if camera else zone.name,
                zone_id=zone.id,
                zone_name=zone.name,
                event_type=EventType.ZONE_BREACH,
                severity=PRIORITY_SEVERITY.get(zone.priority, Severity.WARNING),
                metadata=EventMetadata(confidence=100, object_detected=subject or "person"),
            )
            recorded = await self.registry.record_event(event)
            if recorded is not None:
                event = recorded
            self._deduplicator.register_event(sig_hash, event.id)
            print(f"[DISPATCHER] Zone breach: {zone.name} by {subject or 'unknown'}")

            await self.publish(event)
            events.append(event)

            if zone.auto_recording:
                for camera_id in zone.camera_ids:
                    await self.registry.start_recording(camera_id, TriggerType.ZONE_BREACH)

        self._deduplicator.cleanup_stale()
        return events

    async def close(self) -> None:
        """Cancel every subscription and wait for the polling tasks to finish."""
        tasks = [s.task for s in self._subscriptions if s.task is not None]
        for subscription in list(self._subscriptions):
            subscription.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
