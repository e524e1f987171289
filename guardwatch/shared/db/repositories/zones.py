"""Geofence zone repository."""

from typing import List

from ..models import GeofenceZoneModel
from ...schemas.zone import GeofenceZone
from .base import Repository, row_to_dict


def zone_from_row(row: GeofenceZoneModel) -> GeofenceZone:
    """Convert a GeofenceZoneModel row to the GeofenceZone schema."""
    return GeofenceZone.model_validate(row_to_dict(row))


def zone_to_row(zone: GeofenceZone) -> GeofenceZoneModel:
    """Convert a GeofenceZone schema to a detached row."""
    return GeofenceZoneModel(**zone.model_dump())


class GeofenceZoneRepository(Repository[GeofenceZoneModel]):
    """Repository for geofence zone rows."""

    model = GeofenceZoneModel

    async def get_all(self, limit: int = 1000, offset: int = 0) -> List[GeofenceZoneModel]:
        """Get zones ordered by creation time."""
        query = (
            self._base_query()
            .order_by(GeofenceZoneModel.created_at, GeofenceZoneModel.id)
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_active(self) -> List[GeofenceZoneModel]:
        """Get all active zones."""
        query = self._base_query().where(GeofenceZoneModel.is_active == True)
        result = await self.session.execute(query)
        return list(result.scalars().all())
