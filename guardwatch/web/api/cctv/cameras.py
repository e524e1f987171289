"""Camera API endpoints."""

from fastapi import APIRouter, HTTPException, Query, status

from ....shared.schemas.camera import (
    CameraCreate,
    CameraUpdate,
    CameraResponse,
    CameraListResponse,
    PTZRequest,
    MotionDetectionRequest,
    ScreenshotResponse,
)
from ...auth.dependencies import CurrentUser, ManagerUser
from ...dependencies import Registry

router = APIRouter()


def camera_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Camera not found",
    )


@router.get("", response_model=CameraListResponse)
async def list_cameras(auth: CurrentUser, registry: Registry):
    """
    List all cameras.
    """
    cameras = await registry.list_cameras()
    return CameraListResponse(cameras=cameras, total=len(cameras))


@router.get("/{camera_id}", response_model=CameraResponse)
async def get_camera(camera_id: str, auth: CurrentUser, registry: Registry):
    camera = await registry.get_camera(camera_id)
    if not camera:
        raise camera_not_found()
    return CameraResponse(camera=camera)


@router.post("", response_model=CameraResponse, status_code=status.HTTP_201_CREATED)
async def create_camera(data: CameraCreate, auth: ManagerUser, registry: Registry):
    """
    Create a new camera. Unknown zone ids are dropped.
    """
    if data.id and await registry.get_camera(data.id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Camera {data.id} already exists",
        )

    camera = await registry.create_camera(data)
    if not camera:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Camera could not be created",
        )
    return CameraResponse(camera=camera)


@router.put("/{camera_id}", response_model=CameraResponse)
async def update_camera(
    camera_id: str,
    data: CameraUpdate,
    auth: ManagerUser,
    registry: Registry,
):
    """
    Update camera fields. Only fields present in the body are changed.
    """
    if not await registry.get_camera(camera_id):
        raise camera_not_found()

    camera = await registry.update_camera(camera_id, data)
    if not camera:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Camera could not be updated",
        )
    return CameraResponse(camera=camera)


@router.delete("/{camera_id}")
async def delete_camera(camera_id: str, auth: ManagerUser, registry: Registry):
    """
    Delete a camera and detach it from its zones.
    """
    if not await registry.delete_camera(camera_id):
        raise camera_not_found()
    return {"success": True}


@router.get("/{camera_id}/stream")
async def get_stream_url(
    camera_id: str,
    auth: CurrentUser,
    registry: Registry,
    quality: str = Query(default="1080p"),
):
    if not await registry.get_camera(camera_id):
        raise camera_not_found()
    return {"stream_url": registry.get_stream_url(camera_id, quality)}


@router.post("/{camera_id}/ptz")
async def control_ptz(
    camera_id: str,
    data: PTZRequest,
    auth: CurrentUser,
    registry: Registry,
):
    """
    Send a pan/tilt/zoom command.

    Returns success=false when the camera is not a PTZ camera or the
    command cannot be applied.
    """
    if not await registry.get_camera(camera_id):
        raise camera_not_found()

    success = await registry.control_ptz(camera_id, data.command, data.value)
    return {"success": success}


@router.post("/{camera_id}/screenshot", response_model=ScreenshotResponse)
async def take_screenshot(camera_id: str, auth: CurrentUser, registry: Registry):
    if not await registry.get_camera(camera_id):
        raise camera_not_found()

    url = await registry.take_screenshot(camera_id)
    if not url:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Camera is not online",
        )
    return ScreenshotResponse(screenshot_url=url)


@router.put("/{camera_id}/motion-detection", response_model=CameraResponse)
async def set_motion_detection(
    camera_id: str,
    data: MotionDetectionRequest,
    auth: CurrentUser,
    registry: Registry,
):
    """
    Enable or disable motion detection.
    """
    if not await registry.get_camera(camera_id):
        raise camera_not_found()

    if data.enabled:
        sensitivity = data.sensitivity if data.sensitivity is not None else 50
        success = await registry.enable_motion_detection(camera_id, sensitivity)
    else:
        success = await registry.disable_motion_detection(camera_id)

    camera = await registry.get_camera(camera_id)
    if not success or not camera:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Motion detection could not be changed",
        )
    return CameraResponse(camera=camera)
