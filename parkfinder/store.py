from __future__ import annotations

import logging
from enum import Enum

from parkfinder.models import ParkingLot

logger = logging.getLogger(__name__)


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class LotStore:
    """Lot list and selection shown by the browse screen.

    The list is a tuple that is only ever replaced as a whole, so a reader
    never sees a half-applied edit. The selection is held by id and resolved
    against the current list.
    """

    def __init__(self) -> None:
        self._lots: tuple[ParkingLot, ...] = ()
        self._selected_id: int | None = None
        self.state = LoadState.IDLE
        self.error: str | None = None
        # Bumped on every wholesale replace; local edits leave it alone
        self.generation = 0

    @property
    def lots(self) -> tuple[ParkingLot, ...]:
        return self._lots

    @property
    def selected(self) -> ParkingLot | None:
        if self._selected_id is None:
            return None
        return self.get(self._selected_id)

    @property
    def selected_id(self) -> int | None:
        return self._selected_id

    def get(self, lot_id: int) -> ParkingLot | None:
        for lot in self._lots:
            if lot.id == lot_id:
                return lot
        return None

    def select(self, lot_id: int) -> ParkingLot:
        lot = self.get(lot_id)
        if lot is None:
            raise KeyError(f"No parking lot with id {lot_id}")
        self._selected_id = lot_id
        return lot

    def clear_selection(self) -> None:
        self._selected_id = None

    def mark_loading(self) -> None:
        self.state = LoadState.LOADING
        self.error = None

    def mark_failed(self, message: str) -> None:
        # The previous list stays on screen behind the error
        self.state = LoadState.ERROR
        self.error = message

    def replace(self, lots: list[ParkingLot] | tuple[ParkingLot, ...]) -> None:
        self._lots = tuple(lots)
        self.generation += 1
        self.state = LoadState.READY
        self.error = None
        logger.debug("Lot list replaced (%d lots)", len(self._lots))

    def adjust_available(self, lot_id: int, delta: int) -> bool:
        """Shift one lot's free-spot count by ``delta``.

        Returns False and leaves the list untouched when the lot is gone or
        the result would fall outside ``0..capacity``.
        """
        lot = self.get(lot_id)
        if lot is None:
            return False
        new_available = lot.available + delta
        if new_available < 0 or new_available > lot.capacity:
            logger.warning(
                "Refusing to move lot %s available %d -> %d (capacity %d)",
                lot_id,
                lot.available,
                new_available,
                lot.capacity,
            )
            return False
        updated = lot.with_available(new_available)
        self._lots = tuple(updated if l.id == lot_id else l for l in self._lots)
        return True
