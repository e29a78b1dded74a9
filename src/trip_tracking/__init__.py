"""Location-aware trip status tracking for driver dispatch."""

__version__ = "0.1.0"
