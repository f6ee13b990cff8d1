"""Great-circle distance helpers."""

import math

from localintel.models import Coordinates

EARTH_RADIUS_KM = 6371.0


def haversine_km(origin: Coordinates, target: Coordinates) -> float:
    lat1, lat2 = math.radians(origin.lat), math.radians(target.lat)
    d_lat = lat2 - lat1
    d_lng = math.radians(target.lng - origin.lng)
    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def distance_km(origin: Coordinates, target: Coordinates) -> float:
    """Distance in kilometres rounded to one decimal place."""
    return round(haversine_km(origin, target), 1)
