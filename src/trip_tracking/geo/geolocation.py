"""Geolocation adapter with permission handling and a typed error taxonomy.

The platform location capability is injected as a ``PositionProvider`` and
the permission subsystem as a ``PermissionProvider``. Either may be absent,
in which case the adapter reports ``NOT_SUPPORTED`` or ``unknown``
respectively instead of raising something platform specific.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel, Field

from trip_tracking.core.exceptions import TrackingError
from trip_tracking.metrics import record_location_outcome

if TYPE_CHECKING:
    from trip_tracking.settings import TrackingSettings

logger = logging.getLogger(__name__)


class LocationErrorKind(str, Enum):
    """Why a location could not be acquired."""

    NOT_SUPPORTED = "NOT_SUPPORTED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    POSITION_UNAVAILABLE = "POSITION_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    UNKNOWN = "UNKNOWN"


class LocationPermissionState(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    PROMPT = "prompt"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Any) -> LocationPermissionState:
        """Map a raw platform permission value onto a known state."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).lower())
        except ValueError:
            return cls.UNKNOWN


class LocationError(TrackingError):
    """Location acquisition failure tagged with a ``LocationErrorKind``.

    Callers switch on ``kind`` rather than on subclasses.
    """

    def __init__(
        self,
        message: str,
        kind: LocationErrorKind,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.kind = kind

    @property
    def manual_entry_suggested(self) -> bool:
        """True when retrying cannot help and the caller should offer manual entry."""
        return self.kind in (LocationErrorKind.NOT_SUPPORTED, LocationErrorKind.PERMISSION_DENIED)

    @property
    def retryable(self) -> bool:
        return not self.manual_entry_suggested

    def __repr__(self) -> str:
        return f"LocationError(kind={self.kind.value}, message={self.message!r})"


class PositionError(Exception):
    """Failure reported by a platform position provider.

    Codes follow the W3C geolocation numbering so providers backed by
    browser-class or mobile platforms can pass them through unchanged.
    """

    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3

    def __init__(self, code: int, message: str = ""):
        super().__init__(message or f"position error {code}")
        self.code = code


class PositionOptions(BaseModel):
    enable_high_accuracy: bool = True
    timeout: float = Field(default=15.0, gt=0.0)
    # Oldest cached platform fix (in seconds) the provider may return.
    maximum_age: float = Field(default=60.0, ge=0.0)


class Position(BaseModel):
    """A raw fix as produced by the platform."""

    latitude: float
    longitude: float
    accuracy: float | None = None
    timestamp: float | None = None


class Location(BaseModel):
    """A freshly captured location. Never cached across tracking calls."""

    latitude: float
    longitude: float
    accuracy: float | None = None
    captured_at_epoch_millis: int


class PositionProvider(Protocol):
    async def get_current_position(self, options: PositionOptions) -> Position: ...


class PermissionProvider(Protocol):
    async def query(self) -> str: ...


PermissionCallback = Callable[[LocationPermissionState], None]
Unsubscribe = Callable[[], None]


def _noop() -> None:
    return None


_POSITION_ERROR_KINDS: dict[int, tuple[LocationErrorKind, str]] = {
    PositionError.PERMISSION_DENIED: (
        LocationErrorKind.PERMISSION_DENIED,
        "Permission denied. Please allow location access.",
    ),
    PositionError.POSITION_UNAVAILABLE: (
        LocationErrorKind.POSITION_UNAVAILABLE,
        "Location unavailable. Check GPS/WiFi.",
    ),
    PositionError.TIMEOUT: (
        LocationErrorKind.TIMEOUT,
        "Location request timed out. Try again.",
    ),
}


class GeolocationAdapter:
    """Acquires the device location through injected platform providers."""

    def __init__(
        self,
        positions: PositionProvider | None,
        permissions: PermissionProvider | None = None,
        options: PositionOptions | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._positions = positions
        self._permissions = permissions
        self.options = options or PositionOptions()
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: TrackingSettings,
        positions: PositionProvider | None,
        permissions: PermissionProvider | None = None,
    ) -> GeolocationAdapter:
        options = PositionOptions(
            enable_high_accuracy=settings.enable_high_accuracy,
            timeout=settings.location_timeout_seconds,
            maximum_age=settings.location_maximum_age_seconds,
        )
        return cls(positions, permissions, options)

    @property
    def is_supported(self) -> bool:
        return self._positions is not None

    async def check_permission(self) -> LocationPermissionState:
        """Query the platform permission state; ``unknown`` if it cannot be determined."""
        if self._permissions is None:
            return LocationPermissionState.UNKNOWN

        try:
            raw_state = await self._permissions.query()
        except Exception as e:
            logger.debug(f"Permission query failed, treating as unknown: {e}")
            return LocationPermissionState.UNKNOWN

        return LocationPermissionState.parse(raw_state)

    async def get_current_location(self) -> Location:
        """Acquire a fresh location.

        Raises:
            LocationError: tagged with the reason acquisition failed. A denied
                permission is reported before the platform is asked for a fix.
        """
        try:
            location = await self._acquire()
        except LocationError as e:
            record_location_outcome(e.kind.value)
            raise

        record_location_outcome("success")
        return location

    async def _acquire(self) -> Location:
        if self._positions is None:
            raise LocationError(
                "Location services not supported on this device",
                LocationErrorKind.NOT_SUPPORTED,
            )

        permission_state = await self.check_permission()
        if permission_state == LocationPermissionState.DENIED:
            raise LocationError(
                "Location access denied. Please enable in device settings.",
                LocationErrorKind.PERMISSION_DENIED,
            )

        try:
            position = await asyncio.wait_for(
                self._positions.get_current_position(self.options),
                timeout=self.options.timeout,
            )
        except TimeoutError as e:
            raise LocationError(
                "Location access failed: Location request timed out. Try again.",
                LocationErrorKind.TIMEOUT,
                details={"timeout_seconds": self.options.timeout},
            ) from e
        except PositionError as e:
            kind, reason = _POSITION_ERROR_KINDS.get(
                e.code, (LocationErrorKind.UNKNOWN, "Unknown error occurred.")
            )
            raise LocationError(
                f"Location access failed: {reason}", kind, details={"code": e.code}
            ) from e
        except LocationError:
            raise
        except Exception as e:
            raise LocationError(
                "Location access failed: Unknown error occurred.",
                LocationErrorKind.UNKNOWN,
                details={"error": str(e)},
            ) from e

        location = Location(
            latitude=position.latitude,
            longitude=position.longitude,
            accuracy=position.accuracy,
            captured_at_epoch_millis=int(self._clock() * 1000),
        )
        logger.debug(
            f"Location captured: {location.latitude}, {location.longitude} "
            f"(accuracy: {location.accuracy}m)"
        )
        return location

    def monitor_permission(self, callback: PermissionCallback) -> Unsubscribe:
        """Subscribe to permission state changes.

        Returns an unsubscribe handle. Platforms without change notification
        yield an inert handle; this method never raises.
        """
        watch = getattr(self._permissions, "watch", None)
        if watch is None:
            return _noop

        def on_change(raw_state: Any) -> None:
            callback(LocationPermissionState.parse(raw_state))

        try:
            unsubscribe = watch(on_change)
        except Exception as e:
            logger.debug(f"Permission change monitoring unavailable: {e}")
            return _noop

        if unsubscribe is None:
            return _noop

        active = True

        def stop() -> None:
            nonlocal active
            if active:
                active = False
                unsubscribe()

        return stop
