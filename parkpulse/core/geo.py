"""
Great-circle distance helpers.
"""

import math

from .schema import ParkingRecord, Position

EARTH_RADIUS_M = 6371000.0


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    # Rounding can push a slightly above 1 for antipodal points
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def distance_m(record: ParkingRecord, position: Position) -> float:
    """Distance in meters from a record's coordinates to a position."""
    return haversine_m(
        position.latitude,
        position.longitude,
        record.coordinates.latitude,
        record.coordinates.longitude,
    )
