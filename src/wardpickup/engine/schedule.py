"""
Pickup schedule engine.

State per household: `(pickup_frequency_days, last_pickup_at, next_pickup_at)`.

Rules:
- `next_pickup_at` is derived: it is only ever written together with
  `last_pickup_at`, by `record_pickup`, as `last + frequency days`.
- Changing the frequency does not move an already-computed `next_pickup_at`;
  the new frequency applies from the next recorded pickup.
- Status (days since/until, overdue) is a pure projection computed on read.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from wardpickup.core.errors import InvalidArgumentError, NotProvisionedError
from wardpickup.core.time import diff_days, utc_now
from wardpickup.domain.models import DEFAULT_FREQUENCY_DAYS, VALID_FREQUENCIES, Household, ScheduleStatus
from wardpickup.engine.optimistic import load_household, update_household
from wardpickup.store.base import HouseholdStore

logger = logging.getLogger(__name__)


def validate_frequency(days: int | None) -> int:
    if isinstance(days, bool) or days not in VALID_FREQUENCIES:
        allowed = ", ".join(str(f) for f in VALID_FREQUENCIES)
        raise InvalidArgumentError(
            f"pickup_frequency_days must be one of: {allowed}.",
            pickup_frequency_days=days,
        )
    return int(days)


def derive_status(household: Household, now: datetime) -> ScheduleStatus:
    """Project schedule fields into day counts and the overdue flag (no I/O)."""
    last = household.last_pickup_at
    nxt = household.next_pickup_at
    days_since = diff_days(last, now) if last else None
    days_until = diff_days(now, nxt) if nxt else None
    return ScheduleStatus(
        household_id=household.id,
        pickup_frequency_days=household.pickup_frequency_days,
        last_pickup_at=last,
        next_pickup_at=nxt,
        days_since_last_pickup=days_since,
        days_until_next_pickup=days_until,
        overdue=days_until is not None and days_until < 0,
    )


def apply_pickup(household: Household, now: datetime) -> Household:
    """New document with the pickup recorded at `now` (readiness cleared)."""
    return household.model_copy(
        update={
            "schedule_provisioned": True,
            "last_pickup_at": now,
            "next_pickup_at": now + timedelta(days=household.pickup_frequency_days),
            "waste_ready": False,
            "updated_at": now,
        }
    )


class ScheduleEngine:
    def __init__(self, store: HouseholdStore, clock: Callable[[], datetime] = utc_now):
        self._store = store
        self._clock = clock

    def get_schedule(self, household_id: str, now: datetime | None = None) -> ScheduleStatus:
        """Return the schedule projection.

        Raises:
            NotFoundError: No such household.
            NotProvisionedError: The household predates schedule tracking; callers
                should prompt the citizen to choose a frequency.
        """
        household = load_household(self._store, household_id)
        if not household.schedule_provisioned:
            raise NotProvisionedError(
                "Pickup schedule is not set up for this household yet.",
                household_id=household_id,
                default_frequency_days=DEFAULT_FREQUENCY_DAYS,
            )
        return derive_status(household, now or self._clock())

    def set_frequency(self, household_id: str, days: int | None) -> ScheduleStatus:
        freq = validate_frequency(days)
        now = self._clock()

        def mutate(current: Household) -> Household:
            if current.schedule_provisioned and current.pickup_frequency_days == freq:
                return current
            return current.model_copy(
                update={"pickup_frequency_days": freq, "schedule_provisioned": True, "updated_at": now}
            )

        stored = update_household(self._store, household_id, mutate)
        logger.info("Pickup frequency for household=%s is %d days", household_id, freq)
        return derive_status(stored, now)

    def record_pickup(self, household_id: str, now: datetime | None = None) -> ScheduleStatus:
        at = now or self._clock()
        stored = update_household(self._store, household_id, lambda current: apply_pickup(current, at))
        logger.info(
            "Recorded pickup for household=%s; next pickup %s",
            household_id,
            stored.next_pickup_at.isoformat() if stored.next_pickup_at else None,
        )
        return derive_status(stored, at)
