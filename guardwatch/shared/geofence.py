"""Geofence geometry: haversine distance and zone membership tests.

Zones are either circles (``center`` + ``radius`` in meters) or polygons
(``coordinates``, at least three vertices). Polygons use a planar ray-casting
test with latitude as the x axis and longitude as the y axis, which is a
good approximation for site-sized zones but not true geodesic containment.
"""

import math
from typing import Any, Iterable, List, Sequence, Tuple

EARTH_RADIUS_KM = 6371.0


def _lat_lon(point: Any) -> Tuple[float, float]:
    """Read (latitude, longitude) from a model or a plain mapping."""
    if isinstance(point, dict):
        return float(point["latitude"]), float(point["longitude"])
    return float(point.latitude), float(point.longitude)


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in meters."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c * 1000


def point_in_polygon(point: Any, polygon: Sequence[Any]) -> bool:
    """
    Ray-casting point-in-polygon test.

    Walks consecutive vertex pairs (wrapping last to first) and toggles
    ``inside`` whenever a ray from the point crosses an edge. Edges are
    half-open in y, so points on vertices resolve the same way every time.

    Args:
        point: Object or mapping with latitude/longitude
        polygon: Ordered vertices (objects or mappings)

    Returns:
        True if the point is inside the polygon
    """
    x, y = _lat_lon(point)
    vertices = [_lat_lon(v) for v in polygon]
    inside = False

    j = len(vertices) - 1
    for i in range(len(vertices)):
        xi, yi = vertices[i]
        xj, yj = vertices[j]

        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i

    return inside


def is_circular(zone: Any) -> bool:
    """A zone with a radius and a center is a circle; its polygon is ignored."""
    return bool(_field(zone, "radius")) and _field(zone, "center") is not None


def is_point_in_zone(point: Any, zone: Any) -> bool:
    """
    Check if a point lies inside a geofence zone.

    Degenerate zones (no radius and fewer than three vertices) never match.
    """
    if is_circular(zone):
        lat, lon = _lat_lon(point)
        c_lat, c_lon = _lat_lon(_field(zone, "center"))
        return haversine_distance(lat, lon, c_lat, c_lon) <= float(_field(zone, "radius"))

    coordinates = _field(zone, "coordinates") or []
    if len(coordinates) >= 3:
        return point_in_polygon(point, coordinates)

    return False


def zones_containing(point: Any, zones: Iterable[Any], active_only: bool = True) -> List[Any]:
    """Return the zones (in input order) that contain the point."""
    matched = []
    for zone in zones:
        if active_only and not _field(zone, "is_active"):
            continue
        if is_point_in_zone(point, zone):
            matched.append(zone)
    return matched
