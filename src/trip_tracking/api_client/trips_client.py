"""Async client for the trips HTTP API."""

from __future__ import annotations

import logging
import time
from types import TracebackType
from typing import Any

import httpx
from pydantic import ValidationError

from trip_tracking.core.exceptions import (
    NetworkError,
    NotFoundError,
    PermanentError,
    ServiceUnavailableError,
)
from trip_tracking.metrics import observe_api_latency
from trip_tracking.settings import APISettings
from trip_tracking.trip import Trip, TripStatusUpdate

logger = logging.getLogger(__name__)


class TripApiError(PermanentError):
    """The trips API rejected the request (4xx other than 404) or sent an unusable body."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class TripNotFoundError(NotFoundError):
    """No trip (or driver location) exists for the requested id."""

    pass


class TripServiceUnavailableError(ServiceUnavailableError):
    """Trips API server error (5xx)."""

    pass


class TripApiNetworkError(NetworkError):
    """Trips API unreachable or the request timed out."""

    pass


class TripsClient:
    """Thin pass-through to the trips backend. Holds no trip state and never retries."""

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

    @classmethod
    def from_settings(cls, settings: APISettings) -> TripsClient:
        return cls(settings.base_url, token=settings.token, timeout=settings.timeout_seconds)

    async def __aenter__(self) -> TripsClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=httpx.Timeout(self.timeout),
            )
        return self._client

    async def get_trip(self, trip_id: str) -> Trip:
        data = await self._request("GET", f"/api/trips/{trip_id}")
        return _parse_trip(data, trip_id)

    async def update_trip_status(self, trip_id: str, update: TripStatusUpdate) -> Trip:
        """Apply a status update and return the updated record.

        A success response without a body means the update was applied, so the
        record is read back instead.
        """
        payload = update.model_dump(mode="json", exclude_none=True)
        data = await self._request("PUT", f"/api/trips/{trip_id}/status", json=payload)
        if data is None:
            logger.debug(f"Empty status update response for trip {trip_id}, reading it back")
            return await self.get_trip(trip_id)
        return _parse_trip(data, trip_id)

    async def get_driver_location(self, driver_id: str) -> dict[str, Any] | None:
        """Last position reported by the driver's device, or None if none exists."""
        try:
            data = await self._request("GET", f"/api/mobile/driver/{driver_id}/location")
        except TripNotFoundError:
            return None
        return data or None

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        start_time = time.perf_counter()
        try:
            response = await self._http().request(method, path, json=json)
        except httpx.TimeoutException as e:
            raise TripApiNetworkError(f"{method} {path} timed out") from e
        except httpx.TransportError as e:
            raise TripApiNetworkError(f"Network error on {method} {path}: {e}") from e
        finally:
            observe_api_latency(method, time.perf_counter() - start_time)

        if response.status_code == 404:
            raise TripNotFoundError(f"Not found: {path}", details={"path": path})
        if response.status_code >= 500:
            raise TripServiceUnavailableError(
                f"Trips API server error: {response.status_code}",
                details={"path": path, "status_code": response.status_code},
            )
        if not response.is_success:
            raise TripApiError(
                f"{response.status_code}: {response.text or response.reason_phrase}",
                status_code=response.status_code,
                details={"path": path},
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TripApiError(
                f"Invalid JSON in {method} {path} response",
                status_code=response.status_code,
                details={"path": path},
            ) from e


def _parse_trip(data: Any, trip_id: str) -> Trip:
    try:
        return Trip.model_validate(data)
    except ValidationError as e:
        raise TripApiError(
            f"Malformed trip record for {trip_id}: {e.error_count()} validation error(s)",
            details={"trip_id": trip_id, "errors": e.errors(include_url=False)},
        ) from e
