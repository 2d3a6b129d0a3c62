from __future__ import annotations

import os

from pydantic import BaseModel


def _env_float(name: str) -> float | None:
    v = os.getenv(name, "").strip()
    if not v:
        return None
    try:
        return float(v)
    except ValueError:
        return None


class Settings(BaseModel):
    # Parking directory REST service (no trailing slash)
    api_base_url: str = "http://localhost:4000"

    # Nearby search radius and the speed used for drive-time estimates
    radius_km: float = 5.0
    speed_kmh: float = 40.0

    # None leaves the transport default in place
    request_timeout_s: float | None = None

    # Fixed device position for the terminal client (no GPS there)
    device_lat: float | None = None
    device_lng: float | None = None

    log_level: str = "WARNING"


def load_settings() -> Settings:
    return Settings(
        api_base_url=os.getenv("PARKFINDER_API_BASE_URL", "http://localhost:4000").strip().rstrip("/"),
        radius_km=_env_float("PARKFINDER_RADIUS_KM") or 5.0,
        speed_kmh=_env_float("PARKFINDER_SPEED_KMH") or 40.0,
        request_timeout_s=_env_float("PARKFINDER_REQUEST_TIMEOUT_S"),
        device_lat=_env_float("PARKFINDER_LAT"),
        device_lng=_env_float("PARKFINDER_LNG"),
        log_level=os.getenv("PARKFINDER_LOG_LEVEL", "WARNING").strip().upper() or "WARNING",
    )


settings = load_settings()
