"""Synthetic CCTV events for demo feeds."""

import random
from datetime import datetime
from typing import Callable, Optional

from ..registry.base import CCTVRegistry
from ..shared.db.models import EventType, Severity
from ..shared.schemas import CCTVEvent, EventMetadata

SYNTHETIC_EVENT_TYPES = [
    EventType.MOTION_DETECTED,
    EventType.ZONE_BREACH,
    EventType.CAMERA_OFFLINE,
]
SYNTHETIC_SEVERITIES = [Severity.INFO, Severity.WARNING, Severity.CRITICAL]

# Source used when no registry (or an empty one) is attached
DEFAULT_SOURCE = {
    "camera_id": "cam-001",
    "camera_name": "Main Entrance",
    "zone_id": "zone-001",
    "zone_name": "Main Entrance Restricted Area",
}


class EventSynthesizer:
    """
    Builds random events from the cameras and zones in a registry.

    Picks a camera, its first zone, an event type among motion, zone breach
    and camera offline, a uniform severity and a 60-99% detection confidence.
    """

    def __init__(
        self,
        registry: Optional[CCTVRegistry] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.registry = registry
        self.rng = rng or random.Random()
        self.clock = clock

    async def _pick_source(self) -> dict:
        if self.registry is None:
            return dict(DEFAULT_SOURCE)

        cameras = await self.registry.list_cameras()
        if not cameras:
            return dict(DEFAULT_SOURCE)

        camera = self.rng.choice(cameras)
        source = {
            "camera_id": camera.id,
            "camera_name": camera.name,
            "zone_id": None,
            "zone_name": None,
        }
        if camera.zone_ids:
            zone = await self.registry.get_zone(camera.zone_ids[0])
            if zone is not None:
                source["zone_id"] = zone.id
                source["zone_name"] = zone.name
        return source

    async def synthesize(self) -> CCTVEvent:
        source = await self._pick_source()
        return CCTVEvent(
            **source,
            event_type=self.rng.choice(SYNTHETIC_EVENT_TYPES),
            severity=self.rng.choice(SYNTHETIC_SEVERITIES),
            timestamp=self.clock(),
            metadata=EventMetadata(
                confidence=self.rng.randint(60, 99),
                object_detected="person",
            ),
        )
