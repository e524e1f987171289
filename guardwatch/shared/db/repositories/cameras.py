"""Camera repository."""

from typing import List

from ..models import CameraModel, CameraStatus
from ...schemas.camera import Camera
from .base import Repository, row_to_dict


def camera_from_row(row: CameraModel) -> Camera:
    """Convert a CameraModel row to the Camera schema."""
    return Camera.model_validate(row_to_dict(row))


def camera_to_row(camera: Camera) -> CameraModel:
    """Convert a Camera schema to a detached CameraModel row."""
    return CameraModel(**camera.model_dump())


class CameraRepository(Repository[CameraModel]):
    """Repository for camera rows."""

    model = CameraModel

    async def get_all(self, limit: int = 1000, offset: int = 0) -> List[CameraModel]:
        """Get cameras ordered by creation time."""
        query = (
            self._base_query()
            .order_by(CameraModel.created_at, CameraModel.id)
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_by_status(self, status: CameraStatus) -> List[CameraModel]:
        """Get cameras by status."""
        query = self._base_query().where(CameraModel.status == status)
        result = await self.session.execute(query)
        return list(result.scalars().all())
