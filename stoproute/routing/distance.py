"""Great-circle distance used for local ordering only, never for billed distances."""

from __future__ import annotations

import math

EARTH_RADIUS_KM = 6371.0


def haversine_km(a, b) -> float:
    """
    Haversine distance in kilometers between two points.

    Args:
        a: Any object with finite ``lat``/``lng`` attributes (Location, Stop)
        b: Same as ``a``

    Returns:
        Distance in kilometers
    """
    lat1, lng1, lat2, lng2 = map(math.radians, [a.lat, a.lng, b.lat, b.lng])

    dlat = lat2 - lat1
    dlng = lng2 - lng1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, h)))
