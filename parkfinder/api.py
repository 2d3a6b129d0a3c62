from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

import requests
from pydantic import ValidationError

from parkfinder.models import (
    BookingRequest,
    Coordinates,
    NewParkingLot,
    ParkingLot,
    RatingRequest,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResultStatus(str, Enum):
    SUCCESS = "success"
    REJECTED = "rejected"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class ApiResult(Generic[T]):
    """Outcome of one call to the parking directory.

    ``REJECTED`` means the service answered with a non-2xx status;
    ``message`` then carries its reason when the body had one.
    ``TRANSPORT_ERROR`` means no usable response came back.
    """

    status: ResultStatus
    value: T | None = None
    message: str | None = None
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.SUCCESS

    @classmethod
    def success(cls, value: T | None = None, status_code: int | None = None) -> "ApiResult[T]":
        return cls(status=ResultStatus.SUCCESS, value=value, status_code=status_code)

    @classmethod
    def rejected(cls, message: str | None, status_code: int | None = None) -> "ApiResult[T]":
        return cls(status=ResultStatus.REJECTED, message=message, status_code=status_code)

    @classmethod
    def transport_error(cls, message: str | None = None) -> "ApiResult[T]":
        return cls(status=ResultStatus.TRANSPORT_ERROR, message=message)


def _json_body(resp: requests.Response) -> Any:
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError:
        return {}


def _reason(body: Any, key: str) -> str | None:
    if not isinstance(body, dict):
        return None
    v = body.get(key)
    if v is None:
        return None
    s = str(v).strip()
    return s or None


class ParkingDirectoryClient:
    """Blocking client for the parking directory REST API.

    Network outcomes never raise: every call returns an :class:`ApiResult`.
    The session is not thread-safe; callers on an event loop go through
    ``parkfinder.reconciler.run_blocking``, which uses a single worker.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _post(self, path: str, payload: dict[str, Any], reason_key: str) -> ApiResult[dict]:
        try:
            resp = self.session.post(
                self._url(path),
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("POST %s failed: %s", path, e)
            return ApiResult.transport_error(str(e))

        body = _json_body(resp)
        if not resp.ok:
            reason = _reason(body, reason_key)
            logger.warning("POST %s rejected: %s %s", path, resp.status_code, reason or "")
            return ApiResult.rejected(reason, status_code=resp.status_code)
        return ApiResult.success(body if isinstance(body, dict) else {}, status_code=resp.status_code)

    def nearby(self, center: Coordinates, radius_km: float) -> ApiResult[list[ParkingLot]]:
        params = {"lat": center.latitude, "lng": center.longitude, "radius": radius_km}
        try:
            resp = self.session.get(
                self._url("/api/parking/nearby"),
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Error fetching parking lots: %s", e)
            return ApiResult.transport_error(str(e))

        if not resp.ok:
            body = _json_body(resp)
            reason = _reason(body, "message") or _reason(body, "error")
            logger.warning("Nearby query rejected: %s %s", resp.status_code, reason or "")
            return ApiResult.rejected(reason, status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            logger.error("Nearby response is not JSON: %s", e)
            return ApiResult.transport_error("invalid JSON in nearby response")

        if not isinstance(data, list):
            logger.error("Nearby response is not a list: %r", type(data).__name__)
            return ApiResult.transport_error("unexpected nearby response shape")

        try:
            lots = [ParkingLot.model_validate(row) for row in data]
        except ValidationError as e:
            logger.error("Nearby response has malformed lots: %s", e)
            return ApiResult.transport_error("malformed parking lot in nearby response")

        return ApiResult.success(lots, status_code=resp.status_code)

    def create_lot(self, lot: NewParkingLot) -> ApiResult[dict]:
        return self._post("/api/parking", lot.model_dump(), reason_key="error")

    def book(self, lot_id: int) -> ApiResult[dict]:
        req = BookingRequest(id=str(lot_id))
        return self._post("/api/parking/book", req.model_dump(), reason_key="message")

    def rate(self, lot_id: int, rating: int) -> ApiResult[dict]:
        req = RatingRequest(id=str(lot_id), rating=rating)
        return self._post("/api/parking/rate", req.model_dump(), reason_key="message")

    def close(self) -> None:
        self.session.close()
