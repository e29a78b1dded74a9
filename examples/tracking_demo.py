#!/usr/bin/env python3
"""Start and complete a trip against a running trips API.

Usage: API_BASE_URL=http://localhost:8081 API_TOKEN=... python examples/tracking_demo.py TRIP_ID DRIVER_ID
"""

import asyncio
import sys

from trip_tracking.api_client import TripsClient
from trip_tracking.geo import GeolocationAdapter, LocationError, NavigationLauncher
from trip_tracking.geo.providers import ReportedPositionProvider, StaticPermissionProvider
from trip_tracking.settings import get_settings
from trip_tracking.tracking_logging import setup_logging_from_settings
from trip_tracking.trip import get_status_actions
from trip_tracking.trips import TripTracker


async def main(trip_id: str, driver_id: str) -> None:
    settings = get_settings()
    setup_logging_from_settings(settings.logging)

    async with TripsClient.from_settings(settings.api) as trips:
        geolocation = GeolocationAdapter.from_settings(
            settings.tracking,
            ReportedPositionProvider(trips, driver_id),
            StaticPermissionProvider("granted"),
        )
        tracker = TripTracker.from_settings(
            settings.tracking, trips, geolocation, NavigationLauncher(opener=print)
        )

        trip = await trips.get_trip(trip_id)
        print(f"Trip {trip.id} is {trip.status.value}")
        print("Actions:", [a.label for a in get_status_actions(trip.status, "driver")])

        try:
            trip = await tracker.start_trip(trip_id)
        except LocationError as e:
            print(f"No start fix ({e.kind.value}), starting manually")
            trip = await tracker.start_trip_manual(trip_id, "Reported by demo script")
        print(f"Started: {trip.status.value}")

        trip = await tracker.complete_trip(trip_id, fuel_cost=4.5, driver_notes="Demo run")
        print(f"Completed: {trip.status.value}, distance={trip.distance_miles} miles")

        summary = await tracker.get_trip_summary(trip_id)
        print(summary.model_dump_json(indent=2))


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)
    asyncio.run(main(sys.argv[1], sys.argv[2]))
