"""Great-circle distance between recorded trip endpoints.

Trip mileage is reported in statute miles, rounded to cents-of-a-mile
precision, so the values stored on a trip are directly comparable.
"""

from math import atan2, cos, radians, sin, sqrt

EARTH_RADIUS_MILES = 3959


def haversine_distance_miles(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Unrounded great-circle distance between two points in miles."""
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Floating error can push `a` a hair past 1.0 for antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_MILES * c


def calculate_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate the distance traveled between two points in miles.

    Uses the Haversine formula with an Earth radius of 3959 miles and
    rounds the result to 2 decimal places. Identical points yield 0.0.

    Args:
        lat1: Latitude of first point in degrees
        lon1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lon2: Longitude of second point in degrees

    Returns:
        Distance between the two points in miles, rounded to 2 decimals
    """
    return round(haversine_distance_miles(lat1, lon1, lat2, lon2), 2)
