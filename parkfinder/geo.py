from __future__ import annotations

import math
from typing import Sequence

from parkfinder.models import Coordinates

EARTH_RADIUS_KM = 6371.0
DEFAULT_SPEED_KMH = 40.0


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    d_lat = math.radians(b.latitude - a.latitude)
    d_lng = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.latitude))
        * math.cos(math.radians(b.latitude))
        * math.sin(d_lng / 2) ** 2
    )
    # clamp guards sqrt(1 - h) against float drift for antipodal points
    h = min(1.0, max(0.0, h))
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def estimated_minutes(distance_km: float, speed_kmh: float = DEFAULT_SPEED_KMH) -> float:
    return distance_km / speed_kmh * 60


def average_rating(ratings: Sequence[int] | None) -> float:
    """Mean of the submitted ratings; 0 when there are none."""
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)
