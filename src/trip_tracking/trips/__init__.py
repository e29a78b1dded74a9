from .trip_tracker import TripTracker

__all__ = ["TripTracker"]
