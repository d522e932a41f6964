"""
Store contract.

Households are a shared mutable resource keyed by `household.id`. The only write
path for an existing household is `compare_and_set`, which lands the whole new
document or nothing, conditioned on the caller having read the current `version`.
Collection records are append-only.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from wardpickup.domain.models import CollectionRecord, Household


class HouseholdStore(ABC):
    @abstractmethod
    def get(self, household_id: str) -> Household | None:
        """Return the current household document, or None."""

    @abstractmethod
    def find_by_user(self, user_id: str) -> Household | None:
        """Return the household owned by `user_id`, or None."""

    @abstractmethod
    def list_households(self) -> list[Household]:
        ...

    @abstractmethod
    def insert(self, household: Household) -> Household:
        """Store a new household at version 1.

        Raises:
            ConflictError: If the id (or the owner's household) already exists.
        """

    @abstractmethod
    def compare_and_set(self, household: Household, expected_version: int) -> Household | None:
        """Replace the stored document if its version still equals `expected_version`.

        Returns the stored document (version bumped), or None when the version moved
        on or the household disappeared.
        """

    @abstractmethod
    def append_collection(self, record: CollectionRecord) -> CollectionRecord:
        ...

    @abstractmethod
    def list_collections(
        self,
        *,
        household_id: str | None = None,
        worker_id: str | None = None,
        since: datetime | None = None,
    ) -> list[CollectionRecord]:
        """Collection records matching all given filters, oldest first."""

    def close(self) -> None:
        return None
