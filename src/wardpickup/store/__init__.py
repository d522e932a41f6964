"""
Household/collection storage backends.

`build_store(settings)` picks the backend named in `settings.store.backend`.
"""

from __future__ import annotations

from wardpickup.config.settings import Settings
from wardpickup.core.env import resolve_project_path

from .base import HouseholdStore
from .file_store import FileStore
from .memory import MemoryStore

__all__ = ["FileStore", "HouseholdStore", "MemoryStore", "build_store"]


def build_store(settings: Settings) -> HouseholdStore:
    if settings.store.backend == "memory":
        return MemoryStore()
    return FileStore(resolve_project_path(settings.store.dir))
