from __future__ import annotations

import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, TypeVar

from parkfinder.api import ApiResult, ParkingDirectoryClient, ResultStatus
from parkfinder.models import Coordinates, ParkingLot
from parkfinder.notifications import Notification, Notifier
from parkfinder.store import LotStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

FETCH_FAILED = "Failed to fetch parking lots"


# One worker: a requests.Session must not be used from several threads at once
_transport = ThreadPoolExecutor(max_workers=1, thread_name_prefix="parkfinder-http")


async def run_blocking(fn: Callable[..., T], *args: Any) -> T:
    # requests blocks; keep it off the loop so handlers stay responsive
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(_transport, functools.partial(fn, *args))


class BookingReconciler:
    """Owns the lot store and every operation that changes it.

    Bookings are applied to the store before the request goes out and
    undone when the service does not confirm them. Ratings are never
    applied locally; a confirmed rating triggers a full refresh instead.
    """

    def __init__(
        self,
        client: ParkingDirectoryClient,
        notifier: Notifier,
        store: LotStore | None = None,
    ) -> None:
        self.client = client
        self.notifier = notifier
        self.store = store or LotStore()
        self._last_query: tuple[Coordinates, float] | None = None

    @property
    def last_query(self) -> tuple[Coordinates, float] | None:
        return self._last_query

    async def fetch_nearby(self, center: Coordinates, radius_km: float) -> ApiResult[list[ParkingLot]]:
        self._last_query = (center, radius_km)
        self.store.mark_loading()
        result = await run_blocking(self.client.nearby, center, radius_km)
        if result.ok:
            self.store.replace(result.value or [])
            logger.info("Loaded %d parking lots near %s,%s", len(self.store.lots), center.latitude, center.longitude)
        else:
            self.store.mark_failed(FETCH_FAILED)
        return result

    async def refresh(self) -> ApiResult[list[ParkingLot]] | None:
        if self._last_query is None:
            logger.warning("Refresh requested before any nearby query; skipping")
            return None
        center, radius_km = self._last_query
        return await self.fetch_nearby(center, radius_km)

    def can_book(self, lot_id: int) -> bool:
        lot = self.store.get(lot_id)
        return lot is not None and lot.available > 0

    async def request_booking(
        self,
        lot_id: int,
        on_ack: Callable[[], None] | None = None,
    ) -> ApiResult[dict] | None:
        """Book one spot at ``lot_id``.

        Returns None without touching anything when the lot is unknown or
        full; otherwise the service's outcome. ``on_ack`` runs when the
        confirmation is dismissed and defaults to clearing the selection.
        """
        lot = self.store.get(lot_id)
        if lot is None or lot.available <= 0:
            logger.info("Booking for lot %s ignored: not bookable", lot_id)
            return None

        if not self.store.adjust_available(lot_id, -1):
            return None
        generation = self.store.generation

        result = await run_blocking(self.client.book, lot_id)

        if result.ok:
            logger.info("Booked a spot at lot %s", lot_id)
            self.notifier.notify(
                Notification(
                    title="Booking Confirmed",
                    message=f"Your parking spot at {lot.name} has been booked successfully!",
                    on_ack=on_ack or self.store.clear_selection,
                )
            )
            await self.refresh()
            return result

        if self.store.generation != generation:
            # The refreshed list already holds the server count, which never had the -1
            logger.info("Booking on lot %s failed after a refresh; nothing to revert", lot_id)
        elif not self.store.adjust_available(lot_id, +1):
            logger.warning("Could not revert booking on lot %s", lot_id)

        if result.status is ResultStatus.REJECTED:
            self.notifier.notify(
                Notification(
                    title="Booking Failed",
                    message=result.message or "Failed to book parking spot.",
                )
            )
        else:
            self.notifier.notify(
                Notification(
                    title="Error",
                    message="An error occurred while booking the parking spot.",
                )
            )
        return result

    async def submit_rating(self, lot_id: int, rating: int) -> ApiResult[dict]:
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValueError(f"rating must be an integer from 1 to 5, got {rating!r}")

        result = await run_blocking(self.client.rate, lot_id, rating)

        if result.ok:
            logger.info("Rated lot %s with %d", lot_id, rating)
            await self.refresh()
            self.notifier.notify(
                Notification(
                    title="Thank You!",
                    message="Your rating has been submitted successfully.",
                )
            )
        elif result.status is ResultStatus.REJECTED:
            self.notifier.notify(
                Notification(title="Error", message=result.message or "Failed to submit rating.")
            )
        else:
            self.notifier.notify(
                Notification(title="Error", message="An error occurred while submitting the rating.")
            )
        return result
