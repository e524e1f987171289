"""Recording session repository."""

from typing import Optional, List

from ..models import RecordingSessionModel, RecordingStatus
from ...schemas.recording import RecordingSession
from .base import Repository, row_to_dict


def recording_from_row(row: RecordingSessionModel) -> RecordingSession:
    """Convert a RecordingSessionModel row to the RecordingSession schema."""
    return RecordingSession.model_validate(row_to_dict(row))


def recording_to_row(recording: RecordingSession) -> RecordingSessionModel:
    """Convert a RecordingSession schema to a detached row."""
    return RecordingSessionModel(**recording.model_dump())


class RecordingRepository(Repository[RecordingSessionModel]):
    """Repository for recording session rows."""

    model = RecordingSessionModel

    async def get_by_camera(
        self,
        camera_id: Optional[str] = None,
        limit: int = 1000,
    ) -> List[RecordingSessionModel]:
        """Get recordings, optionally for one camera, newest first."""
        query = self._base_query()
        if camera_id:
            query = query.where(RecordingSessionModel.camera_id == camera_id)
        query = query.order_by(RecordingSessionModel.start_time.desc()).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_active(self, camera_id: Optional[str] = None) -> List[RecordingSessionModel]:
        """Get sessions still in recording status."""
        query = self._base_query().where(
            RecordingSessionModel.status == RecordingStatus.RECORDING
        )
        if camera_id:
            query = query.where(RecordingSessionModel.camera_id == camera_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())
