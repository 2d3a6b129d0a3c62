from __future__ import annotations

import logging
import math
from typing import Any

from parkfinder.api import ApiResult, ParkingDirectoryClient, ResultStatus
from parkfinder.geo import DEFAULT_SPEED_KMH
from parkfinder.location import LocationProvider, LocationUnavailable, read_position
from parkfinder.models import Coordinates, NewParkingLot, ParkingLot
from parkfinder.notifications import Notification, Notifier
from parkfinder.reconciler import BookingReconciler, run_blocking
from parkfinder.services import filter_by_name, lot_details
from parkfinder.store import LotStore

logger = logging.getLogger(__name__)

MAP_TYPES = ("standard", "satellite", "hybrid", "terrain")


class BrowseLotsScreen:
    """Map of nearby lots with booking and rating.

    Holds view state only; lot data lives in the reconciler's store.
    """

    def __init__(
        self,
        reconciler: BookingReconciler,
        location_provider: LocationProvider,
        radius_km: float = 5.0,
        speed_kmh: float = DEFAULT_SPEED_KMH,
    ) -> None:
        self.reconciler = reconciler
        self.location_provider = location_provider
        self.radius_km = radius_km
        self.speed_kmh = speed_kmh

        self.location: Coordinates | None = None
        self.location_error: str | None = None
        self.loading = False

        self.map_type = MAP_TYPES[0]
        self.show_traffic = False
        self.show_controls = True
        self.search_query = ""

        self.rating_modal_visible = False
        self.selected_rating = 0

    @property
    def store(self) -> LotStore:
        return self.reconciler.store

    @property
    def error(self) -> str | None:
        """Blocking error shown instead of the map, if any."""
        return self.location_error or self.store.error

    async def load(self) -> bool:
        self.loading = True
        try:
            try:
                position = read_position(self.location_provider)
            except LocationUnavailable as e:
                logger.warning("Location unavailable: %s", e)
                self.location_error = str(e)
                return False

            self.location_error = None
            self.location = Coordinates(latitude=position.latitude, longitude=position.longitude)
            result = await self.reconciler.fetch_nearby(self.location, self.radius_km)
            return result.ok
        finally:
            self.loading = False

    async def retry(self) -> bool:
        return await self.load()

    # Map

    def cycle_map_type(self) -> str:
        idx = MAP_TYPES.index(self.map_type)
        self.map_type = MAP_TYPES[(idx + 1) % len(MAP_TYPES)]
        return self.map_type

    def toggle_traffic(self) -> bool:
        self.show_traffic = not self.show_traffic
        return self.show_traffic

    def toggle_controls(self) -> bool:
        self.show_controls = not self.show_controls
        return self.show_controls

    def focus_on_user_location(self) -> Coordinates | None:
        return self.location

    @property
    def visible_lots(self) -> list[ParkingLot]:
        return filter_by_name(self.store.lots, self.search_query)

    def markers(self) -> list[tuple[int, Coordinates, str]]:
        return [(lot.id, lot.coordinates, str(lot.available)) for lot in self.visible_lots]

    # Selection and details

    def select_lot(self, lot_id: int) -> ParkingLot:
        return self.store.select(lot_id)

    def clear_selection(self) -> None:
        self.store.clear_selection()
        self.close_rating_modal()

    @property
    def details(self) -> dict[str, Any] | None:
        lot = self.store.selected
        if lot is None:
            return None
        return lot_details(lot, self.location, self.speed_kmh)

    @property
    def booking_enabled(self) -> bool:
        lot = self.store.selected
        return lot is not None and lot.available > 0

    async def book(self) -> ApiResult[dict] | None:
        lot = self.store.selected
        if lot is None or not self.booking_enabled:
            return None
        return await self.reconciler.request_booking(lot.id, on_ack=self.clear_selection)

    # Rating

    def open_rating_modal(self) -> None:
        if self.store.selected is not None:
            self.rating_modal_visible = True

    def close_rating_modal(self) -> None:
        self.rating_modal_visible = False
        self.selected_rating = 0

    def choose_rating(self, rating: int) -> None:
        if not 1 <= rating <= 5:
            raise ValueError(f"rating must be from 1 to 5, got {rating}")
        self.selected_rating = rating

    @property
    def rating_submit_enabled(self) -> bool:
        return self.selected_rating != 0 and self.store.selected is not None

    async def submit_rating(self) -> ApiResult[dict] | None:
        lot = self.store.selected
        if lot is None or self.selected_rating == 0:
            return None
        result = await self.reconciler.submit_rating(lot.id, self.selected_rating)
        if result.ok:
            self.close_rating_modal()
        return result


class FormValidationError(ValueError):
    pass


def _parse_float(label: str, text: str) -> float:
    try:
        v = float(text.strip())
    except ValueError:
        raise FormValidationError(f"{label} must be a number.") from None
    if not math.isfinite(v):
        raise FormValidationError(f"{label} must be a number.")
    return v


def _parse_int(label: str, text: str) -> int:
    # "12.7" reads as 12, like the mobile form's integer parsing
    return int(_parse_float(label, text))


class AddLotScreen:
    """Form for registering a new parking lot."""

    FIELDS = ("name", "latitude", "longitude", "capacity", "available", "rate")

    def __init__(
        self,
        client: ParkingDirectoryClient,
        notifier: Notifier,
        location_provider: LocationProvider,
    ) -> None:
        self.client = client
        self.notifier = notifier
        self.location_provider = location_provider

        self.current_location: Coordinates | None = None
        self.selected_location: Coordinates | None = None
        self.reset()

    def reset(self) -> None:
        self.name = ""
        self.latitude = ""
        self.longitude = ""
        self.capacity = ""
        self.available = ""
        self.rate = ""

    def open(self) -> None:
        try:
            self.current_location = read_position(self.location_provider)
        except LocationUnavailable as e:
            logger.warning("Location unavailable: %s", e)
            self.notifier.notify(Notification(title="Location", message=str(e)))

    def _fill_location(self, coords: Coordinates) -> None:
        self.selected_location = coords
        self.latitude = str(coords.latitude)
        self.longitude = str(coords.longitude)

    def map_press(self, coords: Coordinates) -> None:
        self._fill_location(coords)

    def use_current_location(self) -> bool:
        if self.current_location is None:
            return False
        self._fill_location(self.current_location)
        return True

    def validate(self) -> NewParkingLot:
        values = {f: str(getattr(self, f) or "").strip() for f in self.FIELDS}
        if not all(values.values()):
            raise FormValidationError("Please fill in all fields.")

        latitude = _parse_float("Latitude", values["latitude"])
        longitude = _parse_float("Longitude", values["longitude"])
        if not -90 <= latitude <= 90:
            raise FormValidationError("Latitude must be between -90 and 90.")
        if not -180 <= longitude <= 180:
            raise FormValidationError("Longitude must be between -180 and 180.")

        capacity = _parse_int("Capacity", values["capacity"])
        available = _parse_int("Available spots", values["available"])
        rate = _parse_int("Rate", values["rate"])
        if capacity < 0 or available < 0 or rate < 0:
            raise FormValidationError("Capacity, available spots and rate cannot be negative.")
        if available > capacity:
            raise FormValidationError("Available spots cannot exceed capacity.")

        return NewParkingLot(
            name=values["name"],
            latitude=latitude,
            longitude=longitude,
            capacity=capacity,
            available=available,
            rate=rate,
        )

    async def submit(self) -> ApiResult[dict] | None:
        try:
            lot = self.validate()
        except FormValidationError as e:
            self.notifier.notify(Notification(title="Error", message=str(e)))
            return None

        result = await run_blocking(self.client.create_lot, lot)
        if result.ok:
            logger.info("Added parking lot %r", lot.name)
            self.notifier.notify(
                Notification(
                    title="Success",
                    message="Parking lot added successfully!",
                    on_ack=self.reset,
                )
            )
        elif result.status is ResultStatus.REJECTED:
            self.notifier.notify(
                Notification(title="Error", message=result.message or "Failed to add parking lot.")
            )
        else:
            self.notifier.notify(
                Notification(title="Error", message="An error occurred while adding the parking lot.")
            )
        return result
