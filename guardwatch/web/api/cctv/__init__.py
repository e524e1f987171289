"""CCTV API module."""

from fastapi import APIRouter

from .cameras import router as cameras_router
from .zones import router as zones_router
from .sse import router as sse_router
from .events import router as events_router
from .recordings import router as recordings_router
from .system import router as system_router

# Create main API router
router = APIRouter(prefix="/cctv")

# Include sub-routers (the stream route must come before /events/{event_id})
router.include_router(cameras_router, prefix="/cameras", tags=["cameras"])
router.include_router(zones_router, prefix="/geofence", tags=["geofence"])
router.include_router(sse_router, tags=["sse"])
router.include_router(events_router, prefix="/events", tags=["events"])
router.include_router(recordings_router, prefix="/recordings", tags=["recordings"])
router.include_router(system_router, prefix="/system", tags=["system"])
