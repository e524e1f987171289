"""Recording API endpoints."""

from typing import Optional

from fastapi import APIRouter, HTTPException, status

from ....shared.schemas.recording import (
    StartRecordingRequest,
    RecordingResponse,
    RecordingListResponse,
)
from ...auth.dependencies import CurrentUser
from ...dependencies import Registry

router = APIRouter()


def recording_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Recording not found",
    )


@router.get("", response_model=RecordingListResponse)
async def list_recordings(
    auth: CurrentUser,
    registry: Registry,
    camera_id: Optional[str] = None,
):
    recordings = await registry.list_recordings(camera_id)
    return RecordingListResponse(recordings=recordings, total=len(recordings))


@router.post("/start", response_model=RecordingResponse, status_code=status.HTTP_201_CREATED)
async def start_recording(data: StartRecordingRequest, auth: CurrentUser, registry: Registry):
    """
    Start recording on a camera.

    Rejected with 409 while the camera already has an active session.
    """
    if not await registry.get_camera(data.camera_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Camera not found",
        )

    recording = await registry.start_recording(data.camera_id, data.trigger_type, data.duration)
    if not recording:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Camera is already recording",
        )
    return RecordingResponse(recording=recording)


@router.get("/{recording_id}", response_model=RecordingResponse)
async def get_recording(recording_id: str, auth: CurrentUser, registry: Registry):
    recording = await registry.get_recording(recording_id)
    if not recording:
        raise recording_not_found()
    return RecordingResponse(recording=recording)


@router.put("/{recording_id}/stop", response_model=RecordingResponse)
async def stop_recording(recording_id: str, auth: CurrentUser, registry: Registry):
    if not await registry.get_recording(recording_id):
        raise recording_not_found()

    if not await registry.stop_recording(recording_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Recording already finished",
        )

    recording = await registry.get_recording(recording_id)
    if not recording:
        raise recording_not_found()
    return RecordingResponse(recording=recording)
