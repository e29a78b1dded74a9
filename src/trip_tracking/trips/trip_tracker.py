"""Location-aware start/complete orchestration for trips.

Starting a trip requires a location fix, or an explicit manual start chosen
by the driver after a location failure. Completing a trip never waits on
the GPS: if the end fix cannot be taken the trip is completed without it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from trip_tracking.geo.distance import calculate_distance
from trip_tracking.geo.geolocation import Location, LocationError
from trip_tracking.metrics import record_action
from trip_tracking.tracking_logging import log_trip_context
from trip_tracking.trip import Trip, TripStatus, TripStatusUpdate, TripTrackingSummary

if TYPE_CHECKING:
    from trip_tracking.api_client.trips_client import TripsClient
    from trip_tracking.geo.geolocation import GeolocationAdapter
    from trip_tracking.geo.navigation import NavigationLauncher
    from trip_tracking.settings import TrackingSettings

logger = logging.getLogger(__name__)

MANUAL_START_NOTE = "Started manually without location"
MANUAL_COMPLETE_NOTE = "Completed manually without location"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _positive_amount(value: float | None) -> float | None:
    """Zero, negative and missing amounts all mean "not provided"."""
    if value is None or value <= 0:
        return None
    return round(value, 2)


class TripTracker:
    """Drives the start (to in_progress) and complete (to completed) transitions.

    Every action issues exactly one status update to the trips API; completing
    also reads the trip first. Nothing is cached between calls and nothing is
    retried.
    """

    def __init__(
        self,
        trips: TripsClient,
        geolocation: GeolocationAdapter,
        navigation: NavigationLauncher | None = None,
        open_navigation_on_start: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._trips = trips
        self._geolocation = geolocation
        self._navigation = navigation
        self._open_navigation_on_start = open_navigation_on_start
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: TrackingSettings,
        trips: TripsClient,
        geolocation: GeolocationAdapter,
        navigation: NavigationLauncher | None = None,
    ) -> TripTracker:
        return cls(
            trips,
            geolocation,
            navigation,
            open_navigation_on_start=settings.open_navigation_on_start,
        )

    async def start_trip(self, trip_id: str) -> Trip:
        """Start a trip at the current location.

        Raises:
            LocationError: if the start location cannot be captured. No update
                is sent; the caller decides whether to retry or start manually.
        """
        with log_trip_context(trip_id, action="start"):
            logger.info("Starting trip tracking")
            try:
                location = await self._geolocation.get_current_location()
            except LocationError as e:
                logger.warning(f"Start location unavailable ({e.kind.value}): {e.message}")
                record_action("start", "location_error")
                raise

            update = TripStatusUpdate(
                status=TripStatus.IN_PROGRESS,
                actual_pickup_time=self._clock(),
                start_latitude=location.latitude,
                start_longitude=location.longitude,
            )
            trip = await self._send_update(trip_id, update, "start")
            logger.info(
                f"Trip started at {location.latitude}, {location.longitude} "
                f"(accuracy: {location.accuracy}m)"
            )
            self._navigate_to_pickup(trip)
            return trip

    async def start_trip_manual(self, trip_id: str, manual_location: str | None = None) -> Trip:
        """Start a trip without GPS, optionally noting where the driver says they are."""
        with log_trip_context(trip_id, action="start_manual"):
            description = (manual_location or "").strip()
            notes = f"Manual start location: {description}" if description else MANUAL_START_NOTE
            update = TripStatusUpdate(
                status=TripStatus.IN_PROGRESS,
                actual_pickup_time=self._clock(),
                driver_notes=notes,
            )
            trip = await self._send_update(trip_id, update, "start_manual")
            logger.info("Trip started manually")
            self._navigate_to_pickup(trip)
            return trip

    async def complete_trip(
        self,
        trip_id: str,
        fuel_cost: float | None = None,
        driver_notes: str | None = None,
    ) -> Trip:
        """Complete a trip, recording the end location and distance when available.

        A location failure here is logged and the trip is completed without end
        coordinates or distance. Only API errors propagate.
        """
        with log_trip_context(trip_id, action="complete"):
            logger.info("Completing trip tracking")
            current = await self._trips.get_trip(trip_id)

            end_location: Location | None
            try:
                end_location = await self._geolocation.get_current_location()
            except LocationError as e:
                logger.warning(
                    f"Completing without end location ({e.kind.value}): {e.message}"
                )
                end_location = None

            update = TripStatusUpdate(
                status=TripStatus.COMPLETED,
                actual_dropoff_time=self._clock(),
                fuel_cost=_positive_amount(fuel_cost),
                driver_notes=driver_notes or None,
            )
            if end_location is not None:
                update.end_latitude = end_location.latitude
                update.end_longitude = end_location.longitude
                if current.start_latitude is not None and current.start_longitude is not None:
                    update.distance_miles = calculate_distance(
                        current.start_latitude,
                        current.start_longitude,
                        end_location.latitude,
                        end_location.longitude,
                    )
                    logger.info(f"Distance calculated: {update.distance_miles} miles")

            return await self._send_update(trip_id, update, "complete")

    async def complete_trip_manual(
        self,
        trip_id: str,
        fuel_cost: float | None = None,
        driver_notes: str | None = None,
        manual_distance: float | None = None,
    ) -> Trip:
        """Complete a trip without GPS, taking the distance from the driver."""
        with log_trip_context(trip_id, action="complete_manual"):
            update = TripStatusUpdate(
                status=TripStatus.COMPLETED,
                actual_dropoff_time=self._clock(),
                driver_notes=driver_notes or MANUAL_COMPLETE_NOTE,
                fuel_cost=_positive_amount(fuel_cost),
                distance_miles=_positive_amount(manual_distance),
            )
            trip = await self._send_update(trip_id, update, "complete_manual")
            logger.info("Trip completed manually")
            return trip

    async def get_trip_summary(self, trip_id: str) -> TripTrackingSummary:
        trip = await self._trips.get_trip(trip_id)
        return TripTrackingSummary(
            has_start_location=trip.has_start_location,
            has_end_location=trip.has_end_location,
            distance_miles=trip.distance_miles,
            fuel_cost=trip.fuel_cost,
            driver_notes=trip.driver_notes,
            actual_pickup_time=trip.actual_pickup_time,
            actual_dropoff_time=trip.actual_dropoff_time,
        )

    def open_navigation(self, destination_address: str) -> None:
        """Best-effort launch of the map application; failures are only logged."""
        if self._navigation is None:
            return
        try:
            self._navigation.open_navigation(destination_address)
        except Exception as e:
            logger.warning(f"Could not open navigation to {destination_address!r}: {e}")

    def _navigate_to_pickup(self, trip: Trip) -> None:
        if self._open_navigation_on_start:
            self.open_navigation(trip.pickup_address)

    async def _send_update(self, trip_id: str, update: TripStatusUpdate, action: str) -> Trip:
        try:
            trip = await self._trips.update_trip_status(trip_id, update)
        except Exception:
            logger.exception(f"Trip {action} update failed")
            record_action(action, "api_error")
            raise
        record_action(action, "success")
        return trip
