"""
Household anchor and waste-ready signaling.

A household is created the first time its owner anchors a location. New
households start `pending` with a provisioned 30-day schedule. Re-anchoring moves
the stored point while the household is still pending or rejected; a verified
anchor is ground truth and cannot be moved by the citizen.

Signaling needs a decodable location only. Verification status does not gate it.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable

from wardpickup.core.errors import InvalidStateError, NotFoundError, UnprocessableLocationError
from wardpickup.core.geo import GeoPoint, is_sentinel
from wardpickup.core.location_codec import decode_location, encode_geojson
from wardpickup.core.time import utc_now
from wardpickup.domain.models import AnchorRequest, Caller, Household, HouseholdStatus
from wardpickup.engine.optimistic import update_household
from wardpickup.store.base import HouseholdStore

logger = logging.getLogger(__name__)


def household_status(household: Household) -> HouseholdStatus:
    has_location = not is_sentinel(decode_location(household.location))
    return HouseholdStatus(
        household_id=household.id,
        can_signal=has_location,
        has_location=has_location,
        waste_ready=household.waste_ready,
        verification_status=household.verification_status,
        ward_number=household.ward_number,
        nickname=household.nickname,
        manual_address=household.manual_address,
        geocoded_address=household.geocoded_address,
    )


class HouseholdService:
    def __init__(self, store: HouseholdStore, clock: Callable[[], datetime] = utc_now):
        self._store = store
        self._clock = clock

    def find_household_for_user(self, user_id: str) -> Household:
        household = self._store.find_by_user(user_id)
        if household is None:
            raise NotFoundError("No household found. Please set up your location first.")
        return household

    def anchor_household(self, caller: Caller, req: AnchorRequest) -> Household:
        """Create or re-anchor the caller's household."""
        point = GeoPoint(lat=req.lat, lng=req.lng)
        if is_sentinel(point):
            raise UnprocessableLocationError("(0, 0) is not a valid home location.")

        now = self._clock()
        details = {
            "location": encode_geojson(point),
            "location_updated_at": now,
            "updated_at": now,
        }
        for field in ("ward_number", "nickname", "manual_address", "geocoded_address"):
            value = getattr(req, field)
            if value is not None:
                details[field] = value

        existing = self._store.find_by_user(caller.id)
        if existing is None:
            household = Household(
                id=str(uuid.uuid4()),
                user_id=caller.id,
                schedule_provisioned=True,
                created_at=now,
                **details,
            )
            stored = self._store.insert(household)
            logger.info("Household=%s anchored for user=%s", stored.id, caller.id)
            return stored

        def mutate(current: Household) -> Household:
            if current.verification_status == "verified":
                raise InvalidStateError(
                    "Household location is verified and can no longer be moved.",
                    current_status=current.verification_status,
                )
            # A moved anchor needs a fresh handshake.
            return current.model_copy(
                update={**details, "verification_status": "pending", "rejection_reason": None, "anchored_by": None}
            )

        stored = update_household(self._store, existing.id, mutate)
        logger.info("Household=%s re-anchored by user=%s", stored.id, caller.id)
        return stored

    def set_waste_ready(self, household_id: str, ready: bool) -> Household:
        now = self._clock()

        def mutate(current: Household) -> Household:
            if is_sentinel(decode_location(current.location)):
                raise InvalidStateError(
                    "Set your home location before signaling waste readiness.",
                    current_status=current.verification_status,
                )
            if current.waste_ready == ready:
                return current
            return current.model_copy(update={"waste_ready": ready, "updated_at": now})

        return update_household(self._store, household_id, mutate)
