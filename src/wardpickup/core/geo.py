from __future__ import annotations
from dataclasses import dataclass
from math import asin, cos, radians, sin, sqrt

"""
Geospatial helpers.

We keep a tiny geometry layer here so the verification handshake and the worker
roster can do distance calculations without pulling in heavier GIS dependencies.
"""

EARTH_RADIUS_M = 6_371_000


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float


# "No valid location" marker returned by the location codec.
SENTINEL = GeoPoint(lat=0.0, lng=0.0)


def is_sentinel(point: GeoPoint) -> bool:
    """True when `point` is the (0, 0) "no valid location" marker."""
    return point.lat == 0 and point.lng == 0


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Compute great-circle distance in meters between two coordinates.

    Inputs are not range-checked; any finite values produce a finite result.
    """
    phi1 = radians(lat1)
    phi2 = radians(lat2)
    dlat = phi2 - phi1
    dlng = radians(lng2) - radians(lng1)

    h = sin(dlat / 2) ** 2 + cos(phi1) * cos(phi2) * sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_M * asin(sqrt(min(1.0, h)))


def distance_between(a: GeoPoint, b: GeoPoint) -> float:
    return haversine_m(a.lat, a.lng, b.lat, b.lng)


def distance_label(meters: float) -> str:
    """Render a distance for worker-facing lists: `42m` below 1 km, else `1.3km`."""
    if meters < 1000:
        return f"{round_half_away(meters)}m"
    return f"{meters / 1000:.1f}km"


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero (Python's round() is banker's)."""
    magnitude = int(abs(value) + 0.5)
    return -magnitude if value < 0 else magnitude
