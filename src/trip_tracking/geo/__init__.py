"""Geolocation, distance and navigation helpers for trip tracking."""

from .distance import calculate_distance
from .geolocation import (
    GeolocationAdapter,
    Location,
    LocationError,
    LocationErrorKind,
    LocationPermissionState,
)
from .navigation import NavigationLauncher, launcher_for_user_agent

__all__ = [
    "calculate_distance",
    "GeolocationAdapter",
    "Location",
    "LocationError",
    "LocationErrorKind",
    "LocationPermissionState",
    "NavigationLauncher",
    "launcher_for_user_agent",
]
