import math
from typing import Sequence

EARTH_RADIUS_KM = 6371.0

LatLon = tuple[float, float]


def haversine_distance(p1: Sequence[float], p2: Sequence[float]) -> float:
    """Great-circle distance in km between two (lat, lon) points."""
    lat1, lon1 = math.radians(p1[0]), math.radians(p1[1])
    lat2, lon2 = math.radians(p2[0]), math.radians(p2[1])

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_to_route(point: Sequence[float], route: Sequence[Sequence[float]]) -> float:
    """
    Minimum distance in km from ``point`` to any vertex of ``route``.

    Vertices only, no projection onto segments, so the result is as good as
    the geometry is dense. An empty route is infinitely far away.
    """
    best = math.inf
    for vertex in route:
        d = haversine_distance(point, vertex)
        if d < best:
            best = d
    return best


def is_valid_coordinate(lat: float, lon: float) -> bool:
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0
