"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- stored entities (`Household`, `CollectionRecord`)
- caller identity handed down by the auth gateway (`Caller`)
- API/CLI inputs (`VerifyRequest`, `CollectRequest`, ...)
- engine outputs (`ScheduleStatus`, `VerificationOutcome`, `CollectionOutcome`)

The fixed collection rules live here as module constants, not part of `Settings`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from wardpickup.core.time import ensure_tz

# Maximum worker-to-anchor distance for a verify handshake (inclusive).
MAX_VERIFY_DISTANCE_M = 50
VALID_FREQUENCIES = (15, 30, 60, 90)
DEFAULT_FREQUENCY_DAYS = 30
COLLECTION_CREDITS = 10
DEFAULT_REJECTION_REASON = "Rejected by worker"

Role = Literal["citizen", "worker", "admin"]
VerificationStatus = Literal["pending", "verified", "rejected"]
VerifyAction = Literal["verify", "reject"]
RosterFilter = Literal["waste_ready", "overdue", "pending_verification"]

STAFF_ROLES = frozenset({"worker", "admin"})


class Caller(BaseModel):
    """Authenticated identity as asserted by the upstream auth provider."""

    id: str
    role: Role
    ward_number: int | None = None


class Household(BaseModel):
    """One registered residence, its anchor, verification state and pickup schedule."""

    id: str
    user_id: str

    location: Any | None = None
    ward_number: int | None = None
    nickname: str | None = None
    manual_address: str | None = None
    geocoded_address: str | None = None

    verification_status: VerificationStatus = "pending"
    anchored_by: str | None = None
    anchored_at: datetime | None = None
    rejection_reason: str | None = None

    waste_ready: bool = False

    # Records written before schedule tracking existed load with this False.
    schedule_provisioned: bool = False
    pickup_frequency_days: int = DEFAULT_FREQUENCY_DAYS
    last_pickup_at: datetime | None = None
    next_pickup_at: datetime | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None
    location_updated_at: datetime | None = None

    version: int = 0

    @field_validator(
        "anchored_at", "last_pickup_at", "next_pickup_at", "created_at", "updated_at", "location_updated_at"
    )
    @classmethod
    def _attach_utc(cls, value: datetime | None) -> datetime | None:
        # Older documents were written without an offset.
        return ensure_tz(value) if value is not None else None


class CollectionRecord(BaseModel):
    """Immutable log entry for one physical pickup."""

    model_config = {"frozen": True}

    id: str
    household_id: str
    worker_id: str
    citizen_id: str
    waste_types: list[str] = Field(default_factory=list)
    weight_kg: float | None = None
    notes: str | None = None
    collected_lat: float | None = None
    collected_lng: float | None = None
    collected_at: datetime

    @field_validator("collected_at")
    @classmethod
    def _attach_utc(cls, value: datetime) -> datetime:
        return ensure_tz(value)


class ScheduleStatus(BaseModel):
    """Read-only schedule projection for a household at a given instant."""

    household_id: str
    pickup_frequency_days: int
    last_pickup_at: datetime | None
    next_pickup_at: datetime | None
    days_since_last_pickup: int | None
    days_until_next_pickup: int | None
    overdue: bool


class HouseholdStatus(BaseModel):
    """Citizen-facing anchor/readiness summary."""

    household_id: str
    can_signal: bool
    has_location: bool
    waste_ready: bool
    verification_status: VerificationStatus
    ward_number: int | None = None
    nickname: str | None = None
    manual_address: str | None = None
    geocoded_address: str | None = None


class VerificationOutcome(BaseModel):
    household_id: str
    verification_status: VerificationStatus
    distance_meters: int


class CollectionOutcome(BaseModel):
    """Result of a collection; `warnings` is non-empty when follow-up writes failed."""

    collection_id: str
    record: CollectionRecord
    schedule: ScheduleStatus | None = None
    credits_awarded: int = 0
    warnings: list[str] = Field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.warnings)


class RosterEntry(BaseModel):
    """One household row in a worker's list (location decoded, raw shape dropped)."""

    id: str
    user_id: str
    nickname: str | None = None
    manual_address: str | None = None
    geocoded_address: str | None = None
    waste_ready: bool
    ward_number: int | None = None
    verification_status: VerificationStatus
    pickup_frequency_days: int
    last_pickup_at: datetime | None = None
    next_pickup_at: datetime | None = None
    lat: float
    lng: float
    distance_m: float | None = None
    distance_label: str | None = None


class WardSummary(BaseModel):
    ward_number: int | None
    total_households: int
    waste_ready: int
    pending_verification: int
    today_collections: int


class AnchorRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    ward_number: int | None = Field(default=None, ge=1)
    nickname: str | None = None
    manual_address: str | None = None
    geocoded_address: str | None = None


class WasteReadyRequest(BaseModel):
    ready: bool


class ScheduleRequest(BaseModel):
    action: Literal["set_frequency", "record_pickup"]
    pickup_frequency_days: int | None = None


class VerifyRequest(BaseModel):
    household_id: str
    lat: float
    lng: float
    action: VerifyAction
    rejection_reason: str | None = None


class CollectRequest(BaseModel):
    household_id: str
    waste_types: list[str] = Field(default_factory=list)
    weight_kg: float | None = Field(default=None, ge=0)
    notes: str | None = None
    lat: float | None = None
    lng: float | None = None

    @field_validator("waste_types")
    @classmethod
    def _normalize_waste_types(cls, types: list[str]) -> list[str]:
        return [t.strip().lower() for t in types if t and t.strip()]
