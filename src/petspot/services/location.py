"""Location permission handling for GPS capture on the description step."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from petspot.domain.location import (
    LocationPermissionStatus,
    LocationRequestResult,
    UserLocation,
)

_logger = logging.getLogger(__name__)

StatusCallback = Callable[[LocationPermissionStatus, bool], None]


class LocationService(Protocol):
    """Platform location service."""

    async def authorization_status(self) -> LocationPermissionStatus:
        """Return the current permission status."""

    async def request_when_in_use_authorization(self) -> LocationPermissionStatus:
        """Show the system permission prompt and return the resulting status."""

    async def request_location(self, timeout: float) -> UserLocation | None:
        """Fetch the current coordinate; None on any failure."""


@dataclass
class LocationPermissionHandler:
    """Permission state machine that gates coordinate capture."""

    location_service: LocationService
    location_timeout_seconds: float = 10.0
    status: LocationPermissionStatus = LocationPermissionStatus.NOT_DETERMINED
    _last_known_status: LocationPermissionStatus | None = field(
        init=False, default=None
    )
    _observer: StatusCallback | None = field(init=False, default=None)

    async def request_location_with_permissions(self) -> LocationRequestResult:
        """Prompt when undetermined, then fetch a location if authorized."""
        status = await self.location_service.authorization_status()
        if status is LocationPermissionStatus.NOT_DETERMINED:
            self.status = LocationPermissionStatus.REQUESTING
            status = await self.location_service.request_when_in_use_authorization()
            self._set_status(status)
        else:
            self.status = status
        self._last_known_status = status

        location: UserLocation | None = None
        if status.is_authorized:
            location = await self.location_service.request_location(
                self.location_timeout_seconds
            )
            if location is None:
                _logger.info("Location unavailable despite status=%s", status.value)
        return LocationRequestResult(location=location, status=status)

    async def check_permission_status_change(
        self,
    ) -> tuple[LocationPermissionStatus, bool]:
        """Return the current status and whether it just became authorized."""
        previous = self._last_known_status
        current = await self.location_service.authorization_status()
        self._last_known_status = current
        self.status = current
        was_unauthorized = previous is None or not previous.is_authorized
        return current, was_unauthorized and current.is_authorized

    def observe_status_changes(self, callback: StatusCallback) -> None:
        """Register the callback invoked on prompt answers and foreground returns."""
        if self._observer is not None:
            return
        self._observer = callback

    def stop_observing(self) -> None:
        self._observer = None

    async def notify_foreground(self) -> None:
        """Re-check permissions when the app returns from system settings."""
        status, did_become_authorized = await self.check_permission_status_change()
        if self._observer is not None:
            self._observer(status, did_become_authorized)

    def _set_status(self, status: LocationPermissionStatus) -> None:
        previous = self.status
        self.status = status
        _logger.info("Location permission: %s -> %s", previous.value, status.value)
        if self._observer is not None:
            self._observer(status, status.is_authorized)
