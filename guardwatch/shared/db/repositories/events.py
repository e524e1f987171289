"""Event repository."""

from typing import Optional, List
from datetime import datetime

from sqlalchemy import select, and_

from ..models import CCTVEventModel, Severity
from ...schemas.event import CCTVEvent
from .base import Repository, row_to_dict


def event_from_row(row: CCTVEventModel) -> CCTVEvent:
    """Convert a CCTVEventModel row to the CCTVEvent schema."""
    data = row_to_dict(row)
    data["metadata"] = data.pop("event_metadata")
    return CCTVEvent.model_validate(data)


def event_to_row(event: CCTVEvent) -> CCTVEventModel:
    """Convert a CCTVEvent schema to a detached row."""
    data = event.model_dump()
    data["event_metadata"] = data.pop("metadata")
    return CCTVEventModel(**data)


class EventRepository(Repository[CCTVEventModel]):
    """Repository for event rows."""

    model = CCTVEventModel

    async def get_filtered(
        self,
        camera_id: Optional[str] = None,
        severity: Optional[Severity] = None,
        since: Optional[datetime] = None,
        acknowledged: Optional[bool] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[CCTVEventModel]:
        """Get events with filters, newest first."""
        conditions = []

        if camera_id:
            conditions.append(CCTVEventModel.camera_id == camera_id)
        if severity:
            conditions.append(CCTVEventModel.severity == severity)
        if since:
            conditions.append(CCTVEventModel.timestamp >= since)
        if acknowledged is not None:
            conditions.append(CCTVEventModel.acknowledged == acknowledged)

        query = select(CCTVEventModel)
        if conditions:
            query = query.where(and_(*conditions))
        query = (
            query
            .order_by(CCTVEventModel.timestamp.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
