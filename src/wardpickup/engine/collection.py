"""
Collection recording engine.

A worker completing a pickup triggers, in order:
1. append an immutable `CollectionRecord` (server timestamp),
2. advance the household schedule (`record_pickup`, which also clears waste-ready),
3. award `COLLECTION_CREDITS` to the household owner.

Step 1 is the commit point. If it fails nothing else happens and the error
propagates. Steps 2-3 are follow-ups: any failure there, expected or not, leaves
the log entry in place. It is logged at WARNING and returned in
`CollectionOutcome.warnings` so an operator can reconcile.
Duplicate submissions produce duplicate records.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable

from wardpickup.core.errors import LedgerError, PickupError, StoreError
from wardpickup.core.time import utc_now
from wardpickup.domain.models import COLLECTION_CREDITS, Caller, CollectionOutcome, CollectionRecord, ScheduleStatus
from wardpickup.engine.authz import authorize_household
from wardpickup.engine.optimistic import load_household
from wardpickup.engine.schedule import ScheduleEngine
from wardpickup.ledger.credits import CreditLedger
from wardpickup.store.base import HouseholdStore

logger = logging.getLogger(__name__)


class CollectionEngine:
    def __init__(
        self,
        store: HouseholdStore,
        ledger: CreditLedger,
        schedule: ScheduleEngine | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._ledger = ledger
        self._schedule = schedule or ScheduleEngine(store, clock=clock)
        self._clock = clock

    def record_collection(
        self,
        caller: Caller,
        household_id: str,
        waste_types: list[str] | None = None,
        weight_kg: float | None = None,
        notes: str | None = None,
        worker_lat: float | None = None,
        worker_lng: float | None = None,
    ) -> CollectionOutcome:
        """Record a pickup by `caller` (a worker/admin) at `household_id`.

        Raises:
            NotFoundError: No such household.
            ForbiddenError / WardMismatchError: Caller may not act on it.
            StoreError: The log append failed; nothing was written.
        """
        household = load_household(self._store, household_id)
        authorize_household(caller, household)

        now = self._clock()
        record = CollectionRecord(
            id=str(uuid.uuid4()),
            household_id=household.id,
            worker_id=caller.id,
            citizen_id=household.user_id,
            waste_types=list(waste_types or []),
            weight_kg=weight_kg,
            notes=notes,
            collected_lat=worker_lat,
            collected_lng=worker_lng,
            collected_at=now,
        )
        self._store.append_collection(record)
        logger.info("Collection %s logged for household=%s by worker=%s", record.id, household.id, caller.id)

        warnings: list[str] = []

        schedule: ScheduleStatus | None = None
        try:
            schedule = self._schedule.record_pickup(household.id, now=now)
        except Exception as exc:
            logger.warning(
                "Collection %s logged but schedule update failed for household=%s: %s",
                record.id,
                household.id,
                exc,
                exc_info=not isinstance(exc, (PickupError, StoreError)),
            )
            warnings.append(f"schedule_not_updated: {exc}")

        credits = 0
        try:
            self._ledger.award_credits(household.user_id, COLLECTION_CREDITS)
            credits = COLLECTION_CREDITS
        except Exception as exc:
            logger.warning(
                "Collection %s logged but credit award failed for user=%s: %s",
                record.id,
                household.user_id,
                exc,
                exc_info=not isinstance(exc, LedgerError),
            )
            warnings.append(f"credits_not_awarded: {exc}")

        return CollectionOutcome(
            collection_id=record.id,
            record=record,
            schedule=schedule,
            credits_awarded=credits,
            warnings=warnings,
        )

    def collection_history(self, household_id: str) -> list[CollectionRecord]:
        """Collection records for a household, newest first."""
        load_household(self._store, household_id)
        records = self._store.list_collections(household_id=household_id)
        return sorted(records, key=lambda r: r.collected_at, reverse=True)
