"""
Household API routes.

Endpoints:
- POST `/api/households`: anchor (create or move) the caller's household.
- GET  `/api/households/me`: the caller's household status.
- GET  `/api/households/{id}/status`: anchor/readiness status.
- POST `/api/households/{id}/waste-ready`: toggle the waste-ready signal.
- GET  `/api/households/{id}/schedule`: schedule projection.
- POST `/api/households/{id}/schedule`: `set_frequency` (owner or staff) or `record_pickup` (staff).
- GET  `/api/households/{id}/collections`: collection history.
- GET  `/api/health`: liveness.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from wardpickup.domain.models import (
    AnchorRequest,
    Caller,
    CollectionRecord,
    HouseholdStatus,
    ScheduleRequest,
    ScheduleStatus,
    WasteReadyRequest,
)
from wardpickup.engine.authz import require_owner_or_staff, require_staff
from wardpickup.engine.households import household_status
from wardpickup.engine.optimistic import load_household
from wardpickup.engine.services import Services

from .deps import get_caller, get_services

router = APIRouter()


@router.get("/api/health")
def get_health() -> dict:
    return {"status": "ok"}


@router.post("/api/households", response_model=HouseholdStatus)
def post_household(
    req: AnchorRequest,
    caller: Caller = Depends(get_caller),
    services: Services = Depends(get_services),
) -> HouseholdStatus:
    """Anchor the caller's home location (first call creates the household)."""
    if caller.role != "citizen":
        raise HTTPException(
            status_code=403,
            detail={"code": "FORBIDDEN", "message": "Only citizens anchor households."},
        )
    household = services.households.anchor_household(caller, req)
    return household_status(household)


@router.get("/api/households/me", response_model=HouseholdStatus)
def get_my_household(
    caller: Caller = Depends(get_caller),
    services: Services = Depends(get_services),
) -> HouseholdStatus:
    return household_status(services.households.find_household_for_user(caller.id))


@router.get("/api/households/{household_id}/status", response_model=HouseholdStatus)
def get_household_status(
    household_id: str,
    caller: Caller = Depends(get_caller),
    services: Services = Depends(get_services),
) -> HouseholdStatus:
    household = load_household(services.store, household_id)
    require_owner_or_staff(caller, household)
    return household_status(household)


@router.post("/api/households/{household_id}/waste-ready", response_model=HouseholdStatus)
def post_waste_ready(
    household_id: str,
    req: WasteReadyRequest,
    caller: Caller = Depends(get_caller),
    services: Services = Depends(get_services),
) -> HouseholdStatus:
    require_owner_or_staff(caller, load_household(services.store, household_id))
    return household_status(services.households.set_waste_ready(household_id, req.ready))


@router.get("/api/households/{household_id}/schedule", response_model=ScheduleStatus)
def get_schedule(
    household_id: str,
    caller: Caller = Depends(get_caller),
    services: Services = Depends(get_services),
) -> ScheduleStatus:
    require_owner_or_staff(caller, load_household(services.store, household_id))
    return services.schedule.get_schedule(household_id)


@router.post("/api/households/{household_id}/schedule", response_model=ScheduleStatus)
def post_schedule(
    household_id: str,
    req: ScheduleRequest,
    caller: Caller = Depends(get_caller),
    services: Services = Depends(get_services),
) -> ScheduleStatus:
    require_owner_or_staff(caller, load_household(services.store, household_id))
    if req.action == "set_frequency":
        return services.schedule.set_frequency(household_id, req.pickup_frequency_days)
    # Pickup fields are written by workers/admins only.
    require_staff(caller.role)
    return services.schedule.record_pickup(household_id)


@router.get("/api/households/{household_id}/collections", response_model=list[CollectionRecord])
def get_collections(
    household_id: str,
    caller: Caller = Depends(get_caller),
    services: Services = Depends(get_services),
) -> list[CollectionRecord]:
    require_owner_or_staff(caller, load_household(services.store, household_id))
    return services.collection.collection_history(household_id)
