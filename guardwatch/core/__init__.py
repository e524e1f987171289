"""Event dispatching and geofence breach handling."""

from .deduplication import BreachDeduplicator
from .dispatcher import EventDispatcher, Subscription
from .synthesizer import EventSynthesizer

__all__ = [
    "BreachDeduplicator",
    "EventDispatcher",
    "Subscription",
    "EventSynthesizer",
]
