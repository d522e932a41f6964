"""
Role/ward authorization guard.

Rules:
- Only `worker` and `admin` roles act on households.
- When both the caller and the household have a ward, they must match.
- A caller without a ward is not ward-scoped at all.

The same predicate is used as a list filter (`visible_to`) so ward-scoped callers
never see other wards' households.
"""

from __future__ import annotations

from wardpickup.core.errors import ForbiddenError, WardMismatchError
from wardpickup.domain.models import STAFF_ROLES, Caller, Household


def require_staff(role: str | None) -> None:
    if role not in STAFF_ROLES:
        raise ForbiddenError("Worker access only.", role=role)


def authorize(role: str | None, caller_ward: int | None, household_ward: int | None) -> None:
    """Allow or raise `ForbiddenError` / `WardMismatchError`."""
    require_staff(role)
    if caller_ward is not None and household_ward is not None and caller_ward != household_ward:
        raise WardMismatchError(
            "Household is not in your assigned ward.",
            caller_ward=caller_ward,
            household_ward=household_ward,
        )


def authorize_household(caller: Caller, household: Household) -> None:
    authorize(caller.role, caller.ward_number, household.ward_number)


def visible_to(caller: Caller, household: Household) -> bool:
    if caller.role not in STAFF_ROLES:
        return False
    if caller.ward_number is None or household.ward_number is None:
        return True
    return caller.ward_number == household.ward_number


def require_owner_or_staff(caller: Caller, household: Household) -> None:
    """Citizens may only touch their own household; staff go through the ward guard."""
    if caller.role == "citizen":
        if household.user_id != caller.id:
            raise ForbiddenError("This household belongs to another user.")
        return
    authorize_household(caller, household)
