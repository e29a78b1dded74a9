"""Prometheus metrics for the trip tracking core.

Instruments live on a dedicated registry so embedding applications can
expose them alongside (or instead of) the default process metrics.
"""

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

# Use a separate registry to avoid default Python metrics
REGISTRY = CollectorRegistry()

# --- Counters (cumulative values) ---

trip_tracking_location_requests_total = Counter(
    "trip_tracking_location_requests_total",
    "Location acquisitions by outcome (success or error kind)",
    ["outcome"],
    registry=REGISTRY,
)

trip_tracking_actions_total = Counter(
    "trip_tracking_actions_total",
    "Tracking actions by action name and result",
    ["action", "result"],
    registry=REGISTRY,
)

# --- Histograms (latency distributions) ---

API_LATENCY_BUCKETS = (0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, float("inf"))

trip_tracking_api_request_seconds = Histogram(
    "trip_tracking_api_request_seconds",
    "Trip API request latency in seconds",
    ["method"],
    buckets=API_LATENCY_BUCKETS,
    registry=REGISTRY,
)


def record_location_outcome(outcome: str) -> None:
    trip_tracking_location_requests_total.labels(outcome=outcome).inc()


def record_action(action: str, result: str) -> None:
    trip_tracking_actions_total.labels(action=action, result=result).inc()


def observe_api_latency(method: str, seconds: float) -> None:
    trip_tracking_api_request_seconds.labels(method=method).observe(seconds)


def generate_metrics() -> bytes:
    """Render all tracking metrics in Prometheus exposition format."""
    return generate_latest(REGISTRY)
