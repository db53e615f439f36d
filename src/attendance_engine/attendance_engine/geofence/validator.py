"""Geofence checks (haversine great-circle distance)."""

from __future__ import annotations

import math
from typing import Optional

from ..core.constants import EARTH_RADIUS_METERS
from ..core.exceptions import GeofenceError, PreconditionError
from .model import Coordinate


def haversine_distance_meters(origin: Coordinate, target: Coordinate) -> float:
    d_lat = math.radians(target.latitude - origin.latitude)
    d_lng = math.radians(target.longitude - origin.longitude)
    lat1 = math.radians(origin.latitude)
    lat2 = math.radians(target.latitude)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_METERS * c


def validate_geofence(
    reporter: Coordinate,
    center: Optional[Coordinate],
    radius_meters: Optional[float],
    *,
    enabled: bool,
) -> Optional[float]:
    """Return the distance to the workplace, or None when geofencing is off.

    Raises GeofenceError when the reporter is farther than the radius.
    """
    if not enabled:
        return None

    if center is None or radius_meters is None:
        raise PreconditionError("Workplace geofence not configured.")

    distance = haversine_distance_meters(reporter, center)
    if distance > radius_meters:
        raise GeofenceError(distance, radius_meters)
    return distance
