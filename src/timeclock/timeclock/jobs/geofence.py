from __future__ import annotations

import math

from ..core.constants import EARTH_RADIUS_KM, FEET_PER_KILOMETER
from .model import Job


def distance_feet(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle (haversine) distance between two coordinates, in feet."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c * FEET_PER_KILOMETER


def within_geofence(job: Job, latitude: float, longitude: float) -> bool:
    """Is the coordinate inside the job's allowed distance?

    Jobs without the geofence flag accept any coordinate. Geofenced jobs
    without a usable location or radius accept none.
    """
    if not job.config.geofence:
        return True
    location = job.location
    if location is None or location.allowed_distance_feet <= 0:
        return False
    if location.latitude == 0 or location.longitude == 0:
        return False
    return distance_feet(latitude, longitude, location.latitude, location.longitude) <= location.allowed_distance_feet
