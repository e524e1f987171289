"""Database repositories and row/schema converters."""

from .base import Repository, row_to_dict
from .cameras import CameraRepository, camera_from_row, camera_to_row
from .zones import GeofenceZoneRepository, zone_from_row, zone_to_row
from .events import EventRepository, event_from_row, event_to_row
from .recordings import RecordingRepository, recording_from_row, recording_to_row

__all__ = [
    # Base
    "Repository",
    "row_to_dict",
    # Repositories
    "CameraRepository",
    "GeofenceZoneRepository",
    "EventRepository",
    "RecordingRepository",
    # Converters
    "camera_from_row",
    "camera_to_row",
    "zone_from_row",
    "zone_to_row",
    "event_from_row",
    "event_to_row",
    "recording_from_row",
    "recording_to_row",
]
