from __future__ import annotations

from enum import Enum
from typing import Protocol

from parkfinder.models import Coordinates


class LocationUnavailable(Exception):
    """The device position cannot be read."""


class LocationServicesDisabled(LocationUnavailable):
    def __init__(self) -> None:
        super().__init__("Location services are disabled")


class LocationPermissionDenied(LocationUnavailable):
    def __init__(self) -> None:
        super().__init__("Permission to access location was denied")


class Permission(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"


class LocationProvider(Protocol):
    def check_service_enabled(self) -> bool: ...

    def request_permission(self) -> Permission: ...

    def get_current_position(self) -> Coordinates: ...


def read_position(provider: LocationProvider) -> Coordinates:
    """Run the service check and permission prompt, then read the position."""
    if not provider.check_service_enabled():
        raise LocationServicesDisabled()
    if provider.request_permission() is not Permission.GRANTED:
        raise LocationPermissionDenied()
    return provider.get_current_position()


class StaticLocationProvider:
    """Fixed position, for terminals and other hosts without a GPS.

    With no position configured it behaves like a device whose location
    services are switched off.
    """

    def __init__(self, position: Coordinates | None = None) -> None:
        self.position = position

    def check_service_enabled(self) -> bool:
        return self.position is not None

    def request_permission(self) -> Permission:
        return Permission.GRANTED if self.position is not None else Permission.DENIED

    def get_current_position(self) -> Coordinates:
        if self.position is None:
            raise LocationServicesDisabled()
        return self.position
