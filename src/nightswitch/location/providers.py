"""Location sources feeding coordinates to the Timer."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

import httpx

from nightswitch.common.exceptions import LocationUnavailableError
from nightswitch.common.signals import Signal, Subscription
from nightswitch.common.solar import is_valid_location
from nightswitch.config.models import LocationProviderSettings

logger = logging.getLogger(__name__)

Coordinates = tuple[float, float]


class LocationProvider(Protocol):
    async def locate(self) -> Coordinates:
        """Return (latitude, longitude) or raise LocationUnavailableError."""
        ...

    def subscribe(self, callback: Callable[[Coordinates], None]) -> Subscription:
        """Receive every later position update."""
        ...


class StaticLocationProvider:
    """Fixed coordinates; `set_location` pushes an update to subscribers."""

    def __init__(self, latitude: float | None = None, longitude: float | None = None):
        self._coords: Coordinates | None = None
        self._updates = Signal("location")
        if latitude is not None and longitude is not None:
            self._coords = (latitude, longitude)

    async def locate(self) -> Coordinates:
        if self._coords is None or not is_valid_location(*self._coords):
            raise LocationUnavailableError("No static location configured")
        return self._coords

    def subscribe(self, callback: Callable[[Coordinates], None]) -> Subscription:
        return self._updates.connect(callback)

    def set_location(self, latitude: float, longitude: float) -> None:
        self._coords = (latitude, longitude)
        self._updates.emit(self._coords)


class UnavailableLocationProvider:
    """Provider for setups without location services."""

    async def locate(self) -> Coordinates:
        raise LocationUnavailableError("Location services are disabled")

    def subscribe(self, callback: Callable[[Coordinates], None]) -> Subscription:
        return Signal("location").connect(callback)


class IpLocationProvider:
    """City-level position from an IP geolocation JSON endpoint.

    Each successful lookup that differs from the previous one is pushed to
    subscribers.
    """

    def __init__(self, url: str = "https://ipapi.co/json/", timeout: float = 10.0,
                 transport: httpx.AsyncBaseTransport | None = None):
        self._url = url
        self._timeout = timeout
        self._transport = transport
        self._last: Coordinates | None = None
        self._updates = Signal("location")

    async def locate(self) -> Coordinates:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(self._url, follow_redirects=True)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            raise LocationUnavailableError(f"Location lookup failed: {e}") from e
        except ValueError as e:
            raise LocationUnavailableError(f"Location lookup returned invalid JSON: {e}") from e

        try:
            coords = (float(data["latitude"]), float(data["longitude"]))
        except (KeyError, TypeError, ValueError) as e:
            raise LocationUnavailableError(f"No coordinates in location response: {data!r}") from e
        if not is_valid_location(*coords):
            raise LocationUnavailableError(f"Location out of range: {coords}")

        logger.debug("Located at (%.4f; %.4f) via %s", coords[0], coords[1], self._url)
        if self._last is not None and coords != self._last:
            self._updates.emit(coords)
        self._last = coords
        return coords

    def subscribe(self, callback: Callable[[Coordinates], None]) -> Subscription:
        return self._updates.connect(callback)


def build_location_provider(settings: LocationProviderSettings) -> LocationProvider:
    if settings.kind == "ip":
        return IpLocationProvider(settings.url, timeout=settings.timeout_sec)
    if settings.kind == "static":
        return StaticLocationProvider(settings.latitude, settings.longitude)
    return UnavailableLocationProvider()
