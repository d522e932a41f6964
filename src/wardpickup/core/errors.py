"""
Error taxonomy.

Every expected, caller-recoverable condition is a `PickupError` subclass with a
stable `code` and the HTTP status the API answers with. Engines raise these; the
API layer maps them to `{"detail": {"code", "message", ...}}` in one place.

`StoreError` and `LedgerError` are infrastructure failures (I/O against the store
or the credit ledger). They are not `PickupError`s.
"""

from __future__ import annotations

from typing import Any


class PickupError(Exception):
    code = "PICKUP_ERROR"
    status_code = 400

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def as_detail(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.extra}


class NotFoundError(PickupError):
    code = "NOT_FOUND"
    status_code = 404


class InvalidArgumentError(PickupError, ValueError):
    code = "INVALID_ARGUMENT"
    status_code = 400


class InvalidStateError(PickupError):
    code = "INVALID_STATE"
    status_code = 409

    def __init__(self, message: str, *, current_status: str | None = None, **extra: Any):
        super().__init__(message, current_status=current_status, **extra)
        self.current_status = current_status


class UnprocessableLocationError(PickupError):
    code = "UNPROCESSABLE_LOCATION"
    status_code = 422


class ProximityViolationError(PickupError):
    code = "PROXIMITY_VIOLATION"
    status_code = 403

    def __init__(self, distance_meters: int, max_distance_meters: int):
        super().__init__(
            f"Too far from household. You are {distance_meters}m away; "
            f"must be within {max_distance_meters}m.",
            distance_meters=distance_meters,
            max_distance_meters=max_distance_meters,
        )
        self.distance_meters = distance_meters
        self.max_distance_meters = max_distance_meters


class ForbiddenError(PickupError):
    code = "FORBIDDEN"
    status_code = 403


class WardMismatchError(PickupError):
    code = "WARD_MISMATCH"
    status_code = 403


class ConflictError(PickupError):
    code = "CONFLICT"
    status_code = 409


class NotProvisionedError(PickupError):
    code = "NOT_PROVISIONED"
    status_code = 409


class StoreError(RuntimeError):
    """The household/collection store failed to read or write."""


class LedgerError(RuntimeError):
    """The credit ledger rejected or failed an award."""
