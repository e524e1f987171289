"""Registry client for a remote CCTV backend.

Talks to the ``/cctv`` HTTP contract served by ``guardwatch.web`` (or any
compatible backend). Every successful read refreshes a last-known-good
snapshot; when the backend cannot be reached, reads answer from that
snapshot and commands are skipped, with a ``StaleDataWarning`` either way.
"""

import warnings
from typing import Any, Dict, List, Optional, Union

import httpx
from pydantic import BaseModel, ValidationError

from ..config import config
from ..shared.db.models import CameraStatus, PTZCommand, Severity, TriggerType
from ..shared.errors import BackendError, StaleDataWarning
from ..shared.schemas import (
    Camera,
    CCTVEvent,
    GeofenceZone,
    RecordingSession,
    SystemHealth,
)
from .base import CCTVRegistry, CameraChanges, CameraData, ZoneChanges, ZoneData


def _payload(data: Any, partial: bool = False) -> Dict[str, Any]:
    """Request body from a schema or a plain dict."""
    if isinstance(data, BaseModel):
        if partial:
            return data.model_dump(mode="json", exclude_unset=True)
        return data.model_dump(mode="json", exclude_none=True)
    return dict(data)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("error") or body)
    return str(body)


class RemoteRegistry(CCTVRegistry):
    """
    HTTP-backed registry with last-known-good fallback.

    Args:
        base_url: Backend root, e.g. ``https://<project>.supabase.co/functions/v1/server``
        token: Bearer token sent with every request
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests use ``httpx.MockTransport``)
    """

    def __init__(
        self,
        base_url: str = config.CCTV_API_URL,
        token: str = config.CCTV_API_TOKEN,
        timeout: float = config.CCTV_REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        stream_base_url: str = config.STREAM_BASE_URL,
    ):
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self.stream_base_url = stream_base_url.rstrip("/")

        # Last-known-good snapshot
        self._cameras: Dict[str, Camera] = {}
        self._zones: Dict[str, GeofenceZone] = {}
        self._events: Dict[str, CCTVEvent] = {}
        self._recordings: Dict[str, RecordingSession] = {}
        self._health: Optional[SystemHealth] = None

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send a request and return the decoded body, BackendError on any failure."""
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            raise BackendError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            raise BackendError(
                f"{method} {path} returned {response.status_code}: {_error_detail(response)}",
                status_code=response.status_code,
            )
        try:
            body = response.json()
        except ValueError as e:
            raise BackendError(f"{method} {path} returned invalid JSON") from e
        if not isinstance(body, dict):
            raise BackendError(f"{method} {path} returned non-object JSON")
        return body

    def _stale(self, operation: str, error: Exception) -> None:
        print(f"[WARN] {operation}: backend unavailable, using last known data ({error})")
        warnings.warn(
            f"{operation}: backend unavailable, returning last known data",
            StaleDataWarning,
            stacklevel=3,
        )

    def _command_failed(self, operation: str, error: Exception) -> None:
        if isinstance(error, BackendError) and error.is_client_error:
            print(f"[REMOTE] {operation} rejected: {error}")
            return
        print(f"[WARN] {operation} skipped: {error}")
        warnings.warn(
            f"{operation} skipped: backend unavailable",
            StaleDataWarning,
            stacklevel=3,
        )

    # ==================== Cameras ====================

    async def list_cameras(self) -> List[Camera]:
        try:
            data = await self._request("GET", "/cctv/cameras")
            cameras = [Camera.model_validate(c) for c in data.get("cameras", [])]
        except (BackendError, ValidationError) as e:
            self._stale("list_cameras", e)
        else:
            self._cameras = {c.id: c for c in cameras}
        return [c.model_copy(deep=True) for c in self._cameras.values()]

    async def get_camera(self, camera_id: str) -> Optional[Camera]:
        try:
            data = await self._request("GET", f"/cctv/cameras/{camera_id}")
            camera = Camera.model_validate(data["camera"])
        except BackendError as e:
            if e.status_code == 404:
                self._cameras.pop(camera_id, None)
                return None
            self._stale("get_camera", e)
        except (KeyError, ValidationError) as e:
            self._stale("get_camera", e)
        else:
            self._cameras[camera.id] = camera
        cached = self._cameras.get(camera_id)
        return cached.model_copy(deep=True) if cached else None

    async def create_camera(self, data: CameraData) -> Optional[Camera]:
        try:
            body = await self._request("POST", "/cctv/cameras", json=_payload(data))
            camera = Camera.model_validate(body["camera"])
        except (BackendError, KeyError, ValidationError) as e:
            self._command_failed("create_camera", e)
            return None
        self._cameras[camera.id] = camera
        return camera.model_copy(deep=True)

    async def update_camera(self, camera_id: str, updates: CameraChanges) -> Optional[Camera]:
        try:
            body = await self._request(
                "PUT", f"/cctv/cameras/{camera_id}", json=_payload(updates, partial=True)
            )
            camera = Camera.model_validate(body["camera"])
        except (BackendError, KeyError, ValidationError) as e:
            self._command_failed("update_camera", e)
            return None
        self._cameras[camera.id] = camera
        return camera.model_copy(deep=True)

    async def delete_camera(self, camera_id: str) -> bool:
        try:
            body = await self._request("DELETE", f"/cctv/cameras/{camera_id}")
        except BackendError as e:
            self._command_failed("delete_camera", e)
            return False
        if not body.get("success"):
            return False
        self._cameras.pop(camera_id, None)
        for zone in self._zones.values():
            if camera_id in zone.camera_ids:
                zone.camera_ids = [c for c in zone.camera_ids if c != camera_id]
        return True

    # ==================== Zones ====================

    async def list_zones(self) -> List[GeofenceZone]:
        try:
            data = await self._request("GET", "/cctv/geofence/zones")
            zones = [GeofenceZone.model_validate(z) for z in data.get("zones", [])]
        except (BackendError, ValidationError) as e:
            self._stale("list_zones", e)
        else:
            self._zones = {z.id: z for z in zones}
        return [z.model_copy(deep=True) for z in self._zones.values()]

    async def get_zone(self, zone_id: str) -> Optional[GeofenceZone]:
        try:
            data = await self._request("GET", f"/cctv/geofence/zones/{zone_id}")
            zone = GeofenceZone.model_validate(data["zone"])
        except BackendError as e:
            if e.status_code == 404:
                self._zones.pop(zone_id, None)
                return None
            self._stale("get_zone", e)
        except (KeyError, ValidationError) as e:
            self._stale("get_zone", e)
        else:
            self._zones[zone.id] = zone
        cached = self._zones.get(zone_id)
        return cached.model_copy(deep=True) if cached else None

    async def create_zone(self, data: ZoneData) -> Optional[GeofenceZone]:
        try:
            body = await self._request("POST", "/cctv/geofence/zones", json=_payload(data))
            zone = GeofenceZone.model_validate(body["zone"])
        except (BackendError, KeyError, ValidationError) as e:
            self._command_failed("create_zone", e)
            return None
        self._zones[zone.id] = zone
        return zone.model_copy(deep=True)

    async def update_zone(self, zone_id: str, updates: ZoneChanges) -> Optional[GeofenceZone]:
        try:
            body = await self._request(
                "PUT", f"/cctv/geofence/zones/{zone_id}", json=_payload(updates, partial=True)
            )
            zone = GeofenceZone.model_validate(body["zone"])
        except (BackendError, KeyError, ValidationError) as e:
            self._command_failed("update_zone", e)
            return None
        self._zones[zone.id] = zone
        return zone.model_copy(deep=True)

    async def delete_zone(self, zone_id: str) -> bool:
        try:
            body = await self._request("DELETE", f"/cctv/geofence/zones/{zone_id}")
        except BackendError as e:
            self._command_failed("delete_zone", e)
            return False
        if not body.get("success"):
            return False
        self._zones.pop(zone_id, None)
        for camera in self._cameras.values():
            if zone_id in camera.zone_ids:
                camera.zone_ids = [z for z in camera.zone_ids if z != zone_id]
        return True

    # ==================== Events ====================

    async def list_events(
        self,
        limit: int = 100,
        camera_id: Optional[str] = None,
        severity: Optional[Severity] = None,
        acknowledged: Optional[bool] = None,
    ) -> List[CCTVEvent]:
        if limit <= 0:
            return []
        params: Dict[str, Any] = {"limit": limit}
        if camera_id:
            params["camera_id"] = camera_id
        if severity:
            params["severity"] = Severity(severity).value
        if acknowledged is not None:
            params["acknowledged"] = str(acknowledged).lower()

        try:
            data = await self._request("GET", "/cctv/events", params=params)
            events = [CCTVEvent.model_validate(e) for e in data.get("events", [])]
        except (BackendError, ValidationError) as e:
            self._stale("list_events", e)
            events = [
                ev for ev in self._events.values()
                if (camera_id is None or ev.camera_id == camera_id)
                and (severity is None or ev.severity == severity)
                and (acknowledged is None or ev.acknowledged == acknowledged)
            ]
        else:
            for event in events:
                self._events[event.id] = event

        events = sorted(events, key=lambda ev: ev.timestamp, reverse=True)[:limit]
        return [ev.model_copy(deep=True) for ev in events]

    async def get_event(self, event_id: str) -> Optional[CCTVEvent]:
        try:
            data = await self._request("GET", f"/cctv/events/{event_id}")
            event = CCTVEvent.model_validate(data["event"])
        except BackendError as e:
            if e.status_code == 404:
                return None
            self._stale("get_event", e)
        except (KeyError, ValidationError) as e:
            self._stale("get_event", e)
        else:
            self._events[event.id] = event
        cached = self._events.get(event_id)
        return cached.model_copy(deep=True) if cached else None

    async def record_event(self, event: CCTVEvent) -> Optional[CCTVEvent]:
        try:
            body = await self._request("POST", "/cctv/events", json=event.model_dump(mode="json"))
            saved = CCTVEvent.model_validate(body["event"])
        except (BackendError, KeyError, ValidationError) as e:
            self._command_failed("record_event", e)
            return None
        self._events[saved.id] = saved
        return saved.model_copy(deep=True)

    async def acknowledge_event(self, event_id: str, actor: str) -> bool:
        try:
            body = await self._request(
                "PUT",
                f"/cctv/events/{event_id}/acknowledge",
                json={"acknowledged_by": actor},
            )
            event = CCTVEvent.model_validate(body["event"])
        except (BackendError, KeyError, ValidationError) as e:
            self._command_failed("acknowledge_event", e)
            return False
        self._events[event.id] = event
        return True

    # ==================== Recordings ====================

    async def start_recording(
        self,
        camera_id: str,
        trigger_type: Union[TriggerType, str] = TriggerType.MANUAL,
        duration: Optional[float] = None,
    ) -> Optional[RecordingSession]:
        try:
            trigger = TriggerType(trigger_type)
        except ValueError:
            print(f"[REMOTE] Unknown trigger type: {trigger_type}")
            return None
        payload: Dict[str, Any] = {"camera_id": camera_id, "trigger_type": trigger.value}
        if duration is not None:
            payload["duration"] = duration
        try:
            body = await self._request("POST", "/cctv/recordings/start", json=payload)
            recording = RecordingSession.model_validate(body["recording"])
        except (BackendError, KeyError, ValidationError) as e:
            self._command_failed("start_recording", e)
            return None
        self._recordings[recording.id] = recording
        return recording.model_copy(deep=True)

    async def stop_recording(self, recording_id: str) -> bool:
        try:
            body = await self._request("PUT", f"/cctv/recordings/{recording_id}/stop")
            recording = RecordingSession.model_validate(body["recording"])
        except (BackendError, KeyError, ValidationError) as e:
            self._command_failed("stop_recording", e)
            return False
        self._recordings[recording.id] = recording
        return True

    async def list_recordings(self, camera_id: Optional[str] = None) -> List[RecordingSession]:
        params = {"camera_id": camera_id} if camera_id else None
        try:
            data = await self._request("GET", "/cctv/recordings", params=params)
            recordings = [RecordingSession.model_validate(r) for r in data.get("recordings", [])]
        except (BackendError, ValidationError) as e:
            self._stale("list_recordings", e)
            recordings = [
                r for r in self._recordings.values()
                if camera_id is None or r.camera_id == camera_id
            ]
        else:
            for recording in recordings:
                self._recordings[recording.id] = recording

        recordings = sorted(recordings, key=lambda r: r.start_time, reverse=True)
        return [r.model_copy(deep=True) for r in recordings]

    async def get_recording(self, recording_id: str) -> Optional[RecordingSession]:
        try:
            data = await self._request("GET", f"/cctv/recordings/{recording_id}")
            recording = RecordingSession.model_validate(data["recording"])
        except BackendError as e:
            if e.status_code == 404:
                return None
            self._stale("get_recording", e)
        except (KeyError, ValidationError) as e:
            self._stale("get_recording", e)
        else:
            self._recordings[recording.id] = recording
        cached = self._recordings.get(recording_id)
        return cached.model_copy(deep=True) if cached else None

    # ==================== Camera commands ====================

    async def control_ptz(
        self,
        camera_id: str,
        command: Union[PTZCommand, str],
        value: Optional[float] = None,
    ) -> bool:
        try:
            command = PTZCommand(command)
        except ValueError:
            print(f"[REMOTE] Unknown PTZ command: {command}")
            return False
        payload: Dict[str, Any] = {"command": command.value}
        if value is not None:
            payload["value"] = value
        try:
            body = await self._request("POST", f"/cctv/cameras/{camera_id}/ptz", json=payload)
        except BackendError as e:
            self._command_failed("control_ptz", e)
            return False
        return bool(body.get("success"))

    async def take_screenshot(self, camera_id: str) -> Optional[str]:
        try:
            body = await self._request("POST", f"/cctv/cameras/{camera_id}/screenshot")
        except BackendError as e:
            self._command_failed("take_screenshot", e)
            return None
        return body.get("screenshot_url")

    async def _set_motion_detection(self, camera_id: str, payload: Dict[str, Any]) -> bool:
        try:
            body = await self._request(
                "PUT", f"/cctv/cameras/{camera_id}/motion-detection", json=payload
            )
            camera = Camera.model_validate(body["camera"])
        except (BackendError, KeyError, ValidationError) as e:
            self._command_failed("motion_detection", e)
            return False
        self._cameras[camera.id] = camera
        return True

    async def enable_motion_detection(self, camera_id: str, sensitivity: int = 50) -> bool:
        if sensitivity is None or not 0 <= sensitivity <= 100:
            print(f"[REMOTE] Motion sensitivity must be 0-100, got {sensitivity}")
            return False
        return await self._set_motion_detection(
            camera_id, {"enabled": True, "sensitivity": int(sensitivity)}
        )

    async def disable_motion_detection(self, camera_id: str) -> bool:
        return await self._set_motion_detection(camera_id, {"enabled": False})

    # ==================== System ====================

    async def get_system_health(self) -> SystemHealth:
        try:
            data = await self._request("GET", "/cctv/system/health")
            health = SystemHealth.model_validate(data["health"])
        except (BackendError, KeyError, ValidationError) as e:
            self._stale("get_system_health", e)
        else:
            self._health = health
            return health.model_copy()

        # Counts from the snapshot, utilization from the last good report
        previous = self._health or SystemHealth()
        return SystemHealth(
            total_cameras=len(self._cameras),
            online_cameras=sum(1 for c in self._cameras.values() if c.status == CameraStatus.online),
            recording_cameras=len({r.camera_id for r in self._recordings.values() if r.is_active}),
            active_zones=sum(1 for z in self._zones.values() if z.is_active),
            storage_usage=previous.storage_usage,
            bandwidth_usage=previous.bandwidth_usage,
        )

    async def close(self) -> None:
        await self._client.aclose()
