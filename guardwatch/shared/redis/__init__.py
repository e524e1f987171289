"""Redis client and pub/sub helpers."""

from .client import get_redis, close_redis, redis_available
from .pubsub import (
    EVENT_CHANNEL,
    ALERT_CHANNEL,
    EventPublisher,
    EventSubscriber,
    event_message,
    get_event_publisher,
    get_event_subscriber,
)

__all__ = [
    # Client
    "get_redis",
    "close_redis",
    "redis_available",
    # Publishers and Subscribers
    "EVENT_CHANNEL",
    "ALERT_CHANNEL",
    "EventPublisher",
    "EventSubscriber",
    "event_message",
    # Factory functions
    "get_event_publisher",
    "get_event_subscriber",
]
