from unittest.mock import AsyncMock, Mock

import pytest

from tests.factories import FIXED_NOW, NEW_YORK, FakePositionProvider, make_position, make_trip
from trip_tracking.geo.geolocation import GeolocationAdapter, PositionError
from trip_tracking.geo.providers import StaticPermissionProvider
from trip_tracking.trip import TripStatus


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def permission_provider() -> StaticPermissionProvider:
    return StaticPermissionProvider("granted")


@pytest.fixture
def position_provider() -> FakePositionProvider:
    return FakePositionProvider(make_position(*NEW_YORK))


@pytest.fixture
def geolocation(position_provider, permission_provider) -> GeolocationAdapter:
    return GeolocationAdapter(position_provider, permission_provider)


@pytest.fixture
def failing_geolocation(permission_provider) -> GeolocationAdapter:
    provider = FakePositionProvider(PositionError(PositionError.POSITION_UNAVAILABLE))
    return GeolocationAdapter(provider, permission_provider)


@pytest.fixture
def mock_trips_client():
    """Mock trips API client that echoes status updates back as trip records."""
    client = Mock()
    client.get_trip = AsyncMock(return_value=make_trip(status=TripStatus.IN_PROGRESS))

    async def echo_update(trip_id, update):
        return make_trip(id=trip_id, **update.model_dump(exclude_none=True))

    client.update_trip_status = AsyncMock(side_effect=echo_update)
    return client


@pytest.fixture
def mock_navigation():
    """Mock navigation launcher for tracker tests."""
    return Mock()
