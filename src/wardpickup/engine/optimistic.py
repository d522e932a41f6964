"""
Optimistic read-compute-write for household documents.

Every multi-field household mutation goes through `update_household`:
1. read the current document (and its `version`),
2. compute the new document with a pure `mutate(current)` callback,
3. `compare_and_set` conditioned on the version read in step 1.

On a version conflict the whole cycle runs once more, so preconditions checked in
`mutate` (e.g., "still pending") are re-evaluated against fresh state. A second
conflict surfaces as `ConflictError`; we never loop indefinitely.
"""

from __future__ import annotations

import logging
from typing import Callable

from wardpickup.core.errors import ConflictError, NotFoundError
from wardpickup.domain.models import Household
from wardpickup.store.base import HouseholdStore

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2


def load_household(store: HouseholdStore, household_id: str) -> Household:
    household = store.get(household_id)
    if household is None:
        raise NotFoundError("Household not found.", household_id=household_id)
    return household


def update_household(
    store: HouseholdStore,
    household_id: str,
    mutate: Callable[[Household], Household],
) -> Household:
    """Apply `mutate` atomically; returns the stored document.

    `mutate` may raise any `PickupError` to abort without writing. Returning the
    same object it was given means "nothing to change" and skips the write.
    """
    for attempt in range(1, MAX_ATTEMPTS + 1):
        current = load_household(store, household_id)
        updated = mutate(current)
        if updated is current:
            return current
        stored = store.compare_and_set(updated, expected_version=current.version)
        if stored is not None:
            return stored
        logger.warning(
            "Version conflict on household=%s (attempt %d/%d, read version=%d)",
            household_id,
            attempt,
            MAX_ATTEMPTS,
            current.version,
        )
    raise ConflictError(
        "Household was modified concurrently; please retry.",
        household_id=household_id,
    )
