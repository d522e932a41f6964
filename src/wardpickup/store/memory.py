from __future__ import annotations

import threading
from datetime import datetime

from wardpickup.core.errors import ConflictError
from wardpickup.domain.models import CollectionRecord, Household
from wardpickup.store.base import HouseholdStore

"""
In-process store.

A single lock guards both maps, so `compare_and_set` is atomic with respect to
every other store call in the process. Documents are immutable Pydantic models;
callers always get the stored object back and build new ones via `model_copy`.
"""


class MemoryStore(HouseholdStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._households: dict[str, Household] = {}
        self._collections: list[CollectionRecord] = []

    def get(self, household_id: str) -> Household | None:
        with self._lock:
            return self._households.get(household_id)

    def find_by_user(self, user_id: str) -> Household | None:
        with self._lock:
            for h in self._households.values():
                if h.user_id == user_id:
                    return h
        return None

    def list_households(self) -> list[Household]:
        with self._lock:
            return list(self._households.values())

    def insert(self, household: Household) -> Household:
        with self._lock:
            if household.id in self._households:
                raise ConflictError(f"Household {household.id} already exists.")
            if any(h.user_id == household.user_id for h in self._households.values()):
                raise ConflictError("User already has a household.")
            stored = household.model_copy(update={"version": 1})
            self._persist_household(stored)
            self._households[stored.id] = stored
            return stored

    def compare_and_set(self, household: Household, expected_version: int) -> Household | None:
        with self._lock:
            current = self._households.get(household.id)
            if current is None or current.version != expected_version:
                return None
            stored = household.model_copy(update={"version": expected_version + 1})
            self._persist_household(stored)
            self._households[stored.id] = stored
            return stored

    def append_collection(self, record: CollectionRecord) -> CollectionRecord:
        with self._lock:
            self._persist_collection(record)
            self._collections.append(record)
            return record

    def list_collections(
        self,
        *,
        household_id: str | None = None,
        worker_id: str | None = None,
        since: datetime | None = None,
    ) -> list[CollectionRecord]:
        with self._lock:
            records = list(self._collections)
        return [
            r
            for r in records
            if (household_id is None or r.household_id == household_id)
            and (worker_id is None or r.worker_id == worker_id)
            and (since is None or r.collected_at >= since)
        ]

    # Write-through hooks; called with the lock held, before memory is updated.
    def _persist_household(self, household: Household) -> None:
        return None

    def _persist_collection(self, record: CollectionRecord) -> None:
        return None
