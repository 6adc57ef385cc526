"""
Great-circle helpers for the proximity search.

All coordinates are (longitude, latitude) pairs in decimal degrees, the same
order GeoJSON Points use.
"""
import math
from typing import Tuple

EARTH_RADIUS_KM = 6371.0

Coordinates = Tuple[float, float]


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance in kilometers between two (lon, lat) pairs"""
    lon1, lat1 = a
    lon2, lat2 = b

    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def bounding_box(center: Coordinates, radius_km: float) -> Tuple[float, float, float, float]:
    """
    Smallest lon/lat rectangle containing every point within radius_km of center.

    Returns (min_lon, min_lat, max_lon, max_lat). Near the poles, or when the
    circle crosses the antimeridian, the longitude span covers the whole range.
    """
    lon, lat = center
    angular = radius_km / EARTH_RADIUS_KM

    min_lat = lat - math.degrees(angular)
    max_lat = lat + math.degrees(angular)

    if min_lat <= -90 or max_lat >= 90:
        return -180.0, max(min_lat, -90.0), 180.0, min(max_lat, 90.0)

    d_lon = math.degrees(math.asin(min(1.0, math.sin(angular) / math.cos(math.radians(lat)))))
    min_lon = lon - d_lon
    max_lon = lon + d_lon

    if min_lon < -180 or max_lon > 180:
        return -180.0, min_lat, 180.0, max_lat

    return min_lon, min_lat, max_lon, max_lat
