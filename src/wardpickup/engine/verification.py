"""
Verification handshake engine.

Lifecycle: `pending -> verified` or `pending -> rejected`; both are terminal here.

Verifying anchors the household location as ground truth for routing, so the
worker must be physically within `MAX_VERIFY_DISTANCE_M` of the anchor. Rejecting
only flags bad data and is allowed from any distance.

All checks run inside the optimistic update cycle, so two workers racing on the
same household cannot both win: the loser re-reads, sees a non-pending status and
gets `InvalidStateError` (or `ConflictError` if it lost twice).
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from wardpickup.core.errors import InvalidArgumentError, InvalidStateError, ProximityViolationError, UnprocessableLocationError
from wardpickup.core.geo import haversine_m, is_sentinel, round_half_away
from wardpickup.core.location_codec import decode_location
from wardpickup.core.time import utc_now
from wardpickup.domain.models import DEFAULT_REJECTION_REASON, MAX_VERIFY_DISTANCE_M, Household, VerificationOutcome
from wardpickup.engine.optimistic import update_household
from wardpickup.store.base import HouseholdStore

logger = logging.getLogger(__name__)


class VerificationEngine:
    def __init__(self, store: HouseholdStore, clock: Callable[[], datetime] = utc_now):
        self._store = store
        self._clock = clock

    def attempt_verify(
        self,
        household_id: str,
        worker_id: str,
        worker_lat: float,
        worker_lng: float,
        action: str,
        reason: str | None = None,
    ) -> VerificationOutcome:
        """Run the handshake and return the new status with the measured distance.

        Raises:
            NotFoundError, InvalidStateError, UnprocessableLocationError,
            ProximityViolationError, ConflictError
        """
        if action not in ("verify", "reject"):
            raise InvalidArgumentError('action must be "verify" or "reject".', action=action)

        measured: dict[str, float] = {}

        def mutate(current: Household) -> Household:
            if current.verification_status != "pending":
                raise InvalidStateError(
                    f"Household already {current.verification_status}.",
                    current_status=current.verification_status,
                )

            anchor = decode_location(current.location)
            if is_sentinel(anchor):
                raise UnprocessableLocationError("Household has no valid location. Cannot verify.")

            distance = haversine_m(worker_lat, worker_lng, anchor.lat, anchor.lng)
            measured["distance"] = distance
            now = self._clock()

            if action == "verify":
                if distance > MAX_VERIFY_DISTANCE_M:
                    raise ProximityViolationError(round_half_away(distance), MAX_VERIFY_DISTANCE_M)
                return current.model_copy(
                    update={
                        "verification_status": "verified",
                        "anchored_by": worker_id,
                        "anchored_at": now,
                        "rejection_reason": None,
                        "updated_at": now,
                    }
                )

            return current.model_copy(
                update={
                    "verification_status": "rejected",
                    "anchored_by": worker_id,
                    "anchored_at": None,
                    "rejection_reason": reason or DEFAULT_REJECTION_REASON,
                    "updated_at": now,
                }
            )

        stored = update_household(self._store, household_id, mutate)
        distance_m = round_half_away(measured["distance"])
        logger.info(
            "Household=%s %s by worker=%s at %dm",
            household_id,
            stored.verification_status,
            worker_id,
            distance_m,
        )
        return VerificationOutcome(
            household_id=household_id,
            verification_status=stored.verification_status,
            distance_meters=distance_m,
        )
