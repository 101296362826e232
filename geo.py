"""
Geographic math for the GPS path tracker.

Provides the flat-earth (equirectangular) projection of fixes into a local
meter frame around a session origin, and the haversine great-circle distance
used for odometer accounting.

The projection is a tangent-plane approximation: accuracy degrades with
distance from the origin and near the poles, which is acceptable for the
few-kilometer ranges a tracking session covers.
"""

import math
from typing import Optional, Tuple

from constants import EARTH_RADIUS_M


def project(origin, fix, earth_radius_m: float = EARTH_RADIUS_M) -> Tuple[float, float]:
    """Project a fix into local planar meters relative to an origin.

    Args:
        origin: Object with latitude/longitude in degrees, or None
        fix: Object with latitude/longitude in degrees
        earth_radius_m: Sphere radius used by the approximation

    Returns:
        (x, y) in meters, x pointing east and y pointing north.
        (0.0, 0.0) when no origin has been established.
    """
    if origin is None:
        return 0.0, 0.0

    d_lat = fix.latitude - origin.latitude
    d_lon = fix.longitude - origin.longitude

    x = math.radians(d_lon) * earth_radius_m * math.cos(math.radians(origin.latitude))
    y = math.radians(d_lat) * earth_radius_m
    return x, y


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float,
                earth_radius_m: float = EARTH_RADIUS_M) -> float:
    """Compute the great-circle distance in meters between two lat/lon points.

    Args:
        lat1: Latitude 1 in degrees
        lon1: Longitude 1 in degrees
        lat2: Latitude 2 in degrees
        lon2: Longitude 2 in degrees
        earth_radius_m: Sphere radius in meters

    Returns:
        Distance in meters (never negative)
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    # Rounding can push a a hair past 1.0 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return earth_radius_m * c


def distance(a, b, earth_radius_m: Optional[float] = None) -> float:
    """Haversine distance between two objects exposing latitude/longitude."""
    radius = EARTH_RADIUS_M if earth_radius_m is None else earth_radius_m
    return haversine_m(a.latitude, a.longitude, b.latitude, b.longitude, radius)
