from .trips_client import (
    TripApiError,
    TripApiNetworkError,
    TripNotFoundError,
    TripsClient,
    TripServiceUnavailableError,
)

__all__ = [
    "TripsClient",
    "TripApiError",
    "TripApiNetworkError",
    "TripNotFoundError",
    "TripServiceUnavailableError",
]
