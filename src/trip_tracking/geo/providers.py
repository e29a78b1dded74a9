"""Concrete position and permission providers for the geolocation adapter."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Protocol

from trip_tracking.api_client.trips_client import TripApiError
from trip_tracking.geo.geolocation import (
    LocationPermissionState,
    Position,
    PositionError,
    PositionOptions,
)

logger = logging.getLogger(__name__)


class StaticPositionProvider:
    """Always reports the same fix. Used for fixed kiosks and demos."""

    def __init__(self, latitude: float, longitude: float, accuracy: float | None = None):
        self.latitude = latitude
        self.longitude = longitude
        self.accuracy = accuracy

    async def get_current_position(self, options: PositionOptions) -> Position:
        return Position(
            latitude=self.latitude,
            longitude=self.longitude,
            accuracy=self.accuracy,
            timestamp=time.time() * 1000,
        )


class StaticPermissionProvider:
    """Permission state set by the embedding application.

    Subscribers registered through ``watch`` are notified whenever
    ``set_state`` changes the state.
    """

    def __init__(self, state: LocationPermissionState | str = LocationPermissionState.PROMPT):
        self._state = LocationPermissionState.parse(state)
        self._listeners: list[Callable[[str], None]] = []

    @property
    def state(self) -> LocationPermissionState:
        return self._state

    async def query(self) -> str:
        return self._state.value

    def set_state(self, state: LocationPermissionState | str) -> None:
        new_state = LocationPermissionState.parse(state)
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state.value)

    def watch(self, callback: Callable[[str], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe


class DriverLocationSource(Protocol):
    async def get_driver_location(self, driver_id: str) -> dict[str, Any] | None: ...


def _epoch_seconds(raw: Any) -> float | None:
    if raw is None:
        return None
    if isinstance(raw, int | float):
        # Epoch values above ~1e11 are milliseconds.
        return raw / 1000 if raw > 1e11 else float(raw)
    try:
        parsed = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return None
    # Backend timestamps without an offset are UTC.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.timestamp()


class ReportedPositionProvider:
    """Position of a driver as last reported by their device to the backend.

    A report older than ``options.maximum_age`` counts as unavailable, so a
    stale fix is never recorded as the trip start or end point.
    """

    def __init__(
        self,
        source: DriverLocationSource,
        driver_id: str,
        clock: Callable[[], float] = time.time,
    ):
        self._source = source
        self.driver_id = driver_id
        self._clock = clock

    async def get_current_position(self, options: PositionOptions) -> Position:
        try:
            report = await self._source.get_driver_location(self.driver_id)
        except TripApiError as e:
            if e.status_code in (401, 403):
                raise PositionError(PositionError.PERMISSION_DENIED, e.message) from e
            raise

        if not report or report.get("latitude") is None or report.get("longitude") is None:
            raise PositionError(
                PositionError.POSITION_UNAVAILABLE,
                f"No location reported for driver {self.driver_id}",
            )

        reported_at = _epoch_seconds(report.get("timestamp") or report.get("created_at"))
        if reported_at is not None and self._clock() - reported_at > options.maximum_age:
            logger.debug(
                f"Discarding stale location for driver {self.driver_id} "
                f"({self._clock() - reported_at:.0f}s old)"
            )
            raise PositionError(
                PositionError.POSITION_UNAVAILABLE,
                f"Last reported location for driver {self.driver_id} is stale",
            )

        accuracy = report.get("accuracy")
        return Position(
            latitude=float(report["latitude"]),
            longitude=float(report["longitude"]),
            accuracy=float(accuracy) if accuracy is not None else None,
            timestamp=reported_at * 1000 if reported_at is not None else None,
        )
