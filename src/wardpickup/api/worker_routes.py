"""
Worker API routes.

Endpoints:
- POST `/api/worker/verify`: proximity handshake (verify/reject a pending household).
- POST `/api/worker/collect`: record a collection (log + schedule + credits).
- GET  `/api/worker/households`: ward-scoped household list (`filter`, optional `lat`/`lng`).
- GET  `/api/worker/summary`: ward counters for the dashboard.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from wardpickup.core.geo import GeoPoint
from wardpickup.domain.models import (
    Caller,
    CollectRequest,
    RosterEntry,
    RosterFilter,
    VerificationOutcome,
    VerifyRequest,
    WardSummary,
)
from wardpickup.engine.authz import require_staff
from wardpickup.engine.services import Services

from .deps import get_caller, get_services

router = APIRouter(prefix="/api/worker")


@router.post("/verify", response_model=VerificationOutcome)
def post_verify(
    req: VerifyRequest,
    caller: Caller = Depends(get_caller),
    services: Services = Depends(get_services),
) -> VerificationOutcome:
    require_staff(caller.role)
    return services.verification.attempt_verify(
        req.household_id,
        caller.id,
        req.lat,
        req.lng,
        req.action,
        reason=req.rejection_reason,
    )


@router.post("/collect")
def post_collect(
    req: CollectRequest,
    caller: Caller = Depends(get_caller),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    outcome = services.collection.record_collection(
        caller,
        req.household_id,
        waste_types=req.waste_types,
        weight_kg=req.weight_kg,
        notes=req.notes,
        worker_lat=req.lat,
        worker_lng=req.lng,
    )
    payload = outcome.model_dump(mode="json")
    payload["partial"] = outcome.partial
    return payload


@router.get("/households", response_model=list[RosterEntry])
def get_households(
    filter: RosterFilter | None = Query(default=None),
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    caller: Caller = Depends(get_caller),
    services: Services = Depends(get_services),
) -> list[RosterEntry]:
    position = GeoPoint(lat=lat, lng=lng) if lat is not None and lng is not None else None
    return services.roster.list_households(caller, filter, position)


@router.get("/summary", response_model=WardSummary)
def get_summary(
    caller: Caller = Depends(get_caller),
    services: Services = Depends(get_services),
) -> WardSummary:
    return services.roster.ward_summary(caller)
