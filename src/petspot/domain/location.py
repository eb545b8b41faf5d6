"""Location permission domain models."""

from dataclasses import dataclass
from enum import Enum


class LocationPermissionStatus(str, Enum):
    """Authorization state for device location."""

    NOT_DETERMINED = "NOT_DETERMINED"
    REQUESTING = "REQUESTING"
    AUTHORIZED_WHEN_IN_USE = "AUTHORIZED_WHEN_IN_USE"
    AUTHORIZED_ALWAYS = "AUTHORIZED_ALWAYS"
    DENIED = "DENIED"
    RESTRICTED = "RESTRICTED"

    @property
    def is_authorized(self) -> bool:
        return self in {
            LocationPermissionStatus.AUTHORIZED_WHEN_IN_USE,
            LocationPermissionStatus.AUTHORIZED_ALWAYS,
        }

    @property
    def needs_settings_prompt(self) -> bool:
        """Whether the UI should offer an "open settings" recovery prompt."""
        return self in {
            LocationPermissionStatus.DENIED,
            LocationPermissionStatus.RESTRICTED,
        }


@dataclass(frozen=True)
class UserLocation:
    """Geographic coordinate reported by the device."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class LocationRequestResult:
    """Best-effort location plus the permission status it was fetched under."""

    location: UserLocation | None
    status: LocationPermissionStatus
