"""Redis pub/sub helpers for CCTV event streaming."""

import json
from typing import AsyncGenerator, Optional

import redis.asyncio as redis

from ..schemas import CCTVEvent
from .client import get_redis

# Channels
EVENT_CHANNEL = "cctv:events"
ALERT_CHANNEL = "cctv:alerts"
LATEST_EVENT_KEY = "cctv:latest_event"


def event_message(event: CCTVEvent) -> dict:
    """Envelope sent to SSE clients."""
    return {
        "type": "cctv_event",
        "data": {**event.model_dump(mode="json"), "message": event.message},
    }


class EventPublisher:
    """Publishes CCTV events to Redis for SSE broadcast."""

    def __init__(self, client: redis.Redis):
        self.client = client

    async def publish_event(self, event: CCTVEvent) -> int:
        """
        Publish an event to Redis.

        Critical events are also published on the alert channel.

        Returns:
            Number of subscribers that received the message
        """
        message = json.dumps(event_message(event))

        # Keep the latest event for clients that connect late
        await self.client.set(LATEST_EVENT_KEY, message, ex=60)

        received = await self.client.publish(EVENT_CHANNEL, message)
        if event.severity == "critical":
            await self.client.publish(ALERT_CHANNEL, message)
        return received


class EventSubscriber:
    """Subscribes to CCTV events from Redis for SSE."""

    def __init__(self, client: redis.Redis):
        self.client = client
        self._pubsub: Optional[redis.client.PubSub] = None

    async def get_latest_event(self) -> Optional[dict]:
        raw = await self.client.get(LATEST_EVENT_KEY)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return None

    async def subscribe(self, channel: str = EVENT_CHANNEL) -> AsyncGenerator[dict, None]:
        """
        Subscribe to a CCTV event channel.

        Yields:
            Event envelopes as dictionaries
        """
        self._pubsub = self.client.pubsub()

        try:
            await self._pubsub.subscribe(channel)

            async for message in self._pubsub.listen():
                if message["type"] == "message":
                    try:
                        yield json.loads(message["data"])
                    except json.JSONDecodeError:
                        continue

        finally:
            if self._pubsub:
                await self._pubsub.unsubscribe(channel)
                await self._pubsub.aclose()
                self._pubsub = None

    async def unsubscribe(self) -> None:
        """Unsubscribe from events."""
        if self._pubsub:
            await self._pubsub.aclose()
            self._pubsub = None


async def get_event_publisher() -> EventPublisher:
    """Get an event publisher instance."""
    client = await get_redis()
    return EventPublisher(client)


async def get_event_subscriber() -> EventSubscriber:
    """Get an event subscriber instance."""
    client = await get_redis()
    return EventSubscriber(client)
