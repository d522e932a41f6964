"""
Worker roster views.

- `list_households`: the caller's ward (via the authorization guard), optionally
  filtered, ordered waste-ready first then by next pickup (unscheduled last), with
  decoded coordinates and distance from the worker when a position is given.
- `ward_summary`: counters for the worker dashboard.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from wardpickup.core.geo import GeoPoint, distance_between, distance_label
from wardpickup.core.location_codec import decode_location
from wardpickup.core.time import start_of_day, utc_now
from wardpickup.domain.models import Caller, Household, RosterEntry, RosterFilter, WardSummary
from wardpickup.engine.authz import require_staff, visible_to
from wardpickup.store.base import HouseholdStore


def _matches(household: Household, flt: RosterFilter | None, now: datetime) -> bool:
    if flt == "waste_ready":
        return household.waste_ready
    if flt == "pending_verification":
        return household.verification_status == "pending"
    if flt == "overdue":
        return household.next_pickup_at is not None and household.next_pickup_at < now
    return True


def _sort_key(household: Household) -> tuple:
    nxt = household.next_pickup_at
    return (not household.waste_ready, nxt is None, nxt.timestamp() if nxt else 0.0)


def _entry(household: Household, position: GeoPoint | None) -> RosterEntry:
    point = decode_location(household.location)
    distance = distance_between(position, point) if position is not None else None
    return RosterEntry(
        id=household.id,
        user_id=household.user_id,
        nickname=household.nickname,
        manual_address=household.manual_address,
        geocoded_address=household.geocoded_address,
        waste_ready=household.waste_ready,
        ward_number=household.ward_number,
        verification_status=household.verification_status,
        pickup_frequency_days=household.pickup_frequency_days,
        last_pickup_at=household.last_pickup_at,
        next_pickup_at=household.next_pickup_at,
        lat=point.lat,
        lng=point.lng,
        distance_m=distance,
        distance_label=distance_label(distance) if distance is not None else None,
    )


class RosterService:
    def __init__(self, store: HouseholdStore, timezone: str = "UTC", clock: Callable[[], datetime] = utc_now):
        self._store = store
        self._timezone = timezone
        self._clock = clock

    def list_households(
        self,
        caller: Caller,
        flt: RosterFilter | None = None,
        position: GeoPoint | None = None,
        now: datetime | None = None,
    ) -> list[RosterEntry]:
        require_staff(caller.role)
        now = now or self._clock()
        rows = [
            h for h in self._store.list_households() if visible_to(caller, h) and _matches(h, flt, now)
        ]
        rows.sort(key=_sort_key)
        return [_entry(h, position) for h in rows]

    def ward_summary(self, caller: Caller, now: datetime | None = None) -> WardSummary:
        require_staff(caller.role)
        now = now or self._clock()
        visible = [h for h in self._store.list_households() if visible_to(caller, h)]
        today = self._store.list_collections(worker_id=caller.id, since=start_of_day(now, self._timezone))
        return WardSummary(
            ward_number=caller.ward_number,
            total_households=len(visible),
            waste_ready=sum(1 for h in visible if h.waste_ready),
            pending_verification=sum(1 for h in visible if h.verification_status == "pending"),
            today_collections=len(today),
        )
