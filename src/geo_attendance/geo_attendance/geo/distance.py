"""Great-circle distance on a spherical Earth."""

from __future__ import annotations

import math
from numbers import Real

from ..core.constants import EARTH_RADIUS_METERS
from ..core.exceptions import InvalidLocationError


def distance_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance in meters between two (lat, lng) points in degrees.

    Inputs are not validated here.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(max(0.0, 1 - a)))
    return EARTH_RADIUS_METERS * c


def is_within(distance: float, max_distance: float) -> bool:
    return distance <= max_distance


def validate_coordinates(lat: object, lng: object) -> tuple[float, float]:
    if isinstance(lat, bool) or isinstance(lng, bool) or not isinstance(lat, Real) or not isinstance(lng, Real):
        raise InvalidLocationError("Invalid location coordinates - latitude and longitude must be numbers")
    if math.isnan(lat) or math.isnan(lng):
        raise InvalidLocationError("Invalid location coordinates - latitude and longitude must be numbers")
    if lat < -90 or lat > 90:
        raise InvalidLocationError("Invalid latitude - must be between -90 and 90")
    if lng < -180 or lng > 180:
        raise InvalidLocationError("Invalid longitude - must be between -180 and 180")
    return float(lat), float(lng)
