from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    accuracy: float | None = None


class ParkingLot(BaseModel):
    """One parking facility as served by the directory API.

    The service keys lots by ``_id``; ``ratings`` may be missing on lots
    that were never rated.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(alias="_id")
    name: str
    latitude: float
    longitude: float
    capacity: int = Field(ge=0)
    available: int = Field(ge=0)
    rate: float = Field(ge=0)
    ratings: tuple[int, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _clamp_available(cls, data: Any) -> Any:
        # Never display more free spots than the lot holds
        if not isinstance(data, dict):
            return data
        try:
            capacity = int(data["capacity"])
            available = int(data["available"])
        except (KeyError, TypeError, ValueError):
            # Missing or malformed counts are left to field validation
            return data
        if available > capacity:
            return {**data, "available": capacity}
        return data

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)

    def with_available(self, available: int) -> "ParkingLot":
        return self.model_copy(update={"available": available})


class NewParkingLot(BaseModel):
    name: str
    latitude: float
    longitude: float
    capacity: int = Field(ge=0)
    available: int = Field(ge=0)
    rate: int = Field(ge=0)


class BookingRequest(BaseModel):
    # The service expects the lot id as a string
    id: str


class RatingRequest(BaseModel):
    id: str
    rating: int = Field(ge=1, le=5)
