from __future__ import annotations

import math
from datetime import time

from .hours import is_open
from .models import Location, RestaurantRecord

EARTH_RADIUS_KM = 6371.0


def distance_km(a: Location, b: Location) -> float:
    """Great-circle distance between two points using the haversine formula."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.longitude - a.longitude)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def is_eligible(
    record: RestaurantRecord,
    now: time,
    query_location: Location,
    radius_km: float,
) -> bool:
    """True if the restaurant is open now and strictly inside the serving radius."""
    if not is_open(now, record.opens_at, record.closes_at):
        return False
    return distance_km(query_location, record.location) < radius_km
