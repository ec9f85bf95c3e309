"""Great-circle helpers used to measure candidate distance from a search origin."""
from __future__ import annotations

import math
from typing import Tuple

from app.errors import InvalidCoordinate

EARTH_RADIUS_KM = 6371.0

LatLon = Tuple[float, float]


def validate_coordinate(lat: float, lon: float) -> LatLon:
    try:
        lat_f = float(lat)
        lon_f = float(lon)
    except (TypeError, ValueError) as exc:
        raise InvalidCoordinate(f"Non-numeric coordinate ({lat!r}, {lon!r})") from exc
    if math.isnan(lat_f) or math.isnan(lon_f):
        raise InvalidCoordinate(f"NaN coordinate ({lat!r}, {lon!r})")
    if not -90.0 <= lat_f <= 90.0:
        raise InvalidCoordinate(f"Latitude {lat_f} outside [-90, 90]")
    if not -180.0 <= lon_f <= 180.0:
        raise InvalidCoordinate(f"Longitude {lon_f} outside [-180, 180]")
    return lat_f, lon_f


def distance_km(a: LatLon, b: LatLon) -> float:
    """Haversine distance between two ``(lat, lon)`` pairs in kilometres."""
    lat1, lon1 = validate_coordinate(*a)
    lat2, lon2 = validate_coordinate(*b)
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def bearing_deg(a: LatLon, b: LatLon) -> float:
    """Initial compass bearing from ``a`` to ``b`` in degrees, 0..360."""
    lat1, lon1 = validate_coordinate(*a)
    lat2, lon2 = validate_coordinate(*b)
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lon = math.radians(lon2 - lon1)
    x = math.sin(d_lon) * math.cos(phi2)
    y = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lon)
    return (math.degrees(math.atan2(x, y)) + 360.0) % 360.0
