from __future__ import annotations

from typing import Any, Iterable

from parkfinder.geo import DEFAULT_SPEED_KMH, average_rating, estimated_minutes, haversine_km
from parkfinder.models import Coordinates, ParkingLot


def filter_by_name(lots: Iterable[ParkingLot], query: str) -> list[ParkingLot]:
    q = (query or "").strip().lower()
    if not q:
        return list(lots)
    return [lot for lot in lots if q in lot.name.lower()]


def lot_details(
    lot: ParkingLot,
    origin: Coordinates | None,
    speed_kmh: float = DEFAULT_SPEED_KMH,
) -> dict[str, Any]:
    """Everything the details panel shows for one lot.

    Distance and drive time are only known once the device position is.
    """
    distance_km: float | None = None
    eta_min: float | None = None
    if origin is not None:
        distance_km = haversine_km(origin, lot.coordinates)
        eta_min = estimated_minutes(distance_km, speed_kmh)

    return {
        **lot.model_dump(),
        "distance_km": distance_km,
        "eta_min": eta_min,
        "average_rating": average_rating(lot.ratings),
    }


def describe_lots(
    lots: Iterable[ParkingLot],
    origin: Coordinates | None,
    speed_kmh: float = DEFAULT_SPEED_KMH,
    nearest_first: bool = False,
) -> list[dict[str, Any]]:
    rows = [lot_details(lot, origin, speed_kmh) for lot in lots]
    if nearest_first and origin is not None:
        rows.sort(key=lambda r: r["distance_km"])
    return rows


def format_lot(row: dict[str, Any]) -> str:
    parts = [
        f"#{row['id']} {row['name']}",
        f"{row['available']}/{row['capacity']} free",
        f"${row['rate']:g}/hr",
    ]
    if row.get("distance_km") is not None:
        parts.append(f"{row['distance_km']:.2f} km")
        parts.append(f"~{row['eta_min']:.0f} min")
    parts.append(f"rating {row['average_rating']:.1f}")
    return " | ".join(parts)
