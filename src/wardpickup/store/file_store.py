"""
On-disk JSON store.

Layout under `base_dir`:
- `households/<sha256(id)>.json`: one document per household
- `collections.jsonl`: append-only collection log, one record per line

All documents are loaded at startup and served from memory; writes go to disk
first (temp file + atomic replace for households, a single appended line for
collections) and only then become visible, so a failed write leaves both disk
and memory at the previous state. Concurrency control is per-process: run one
API process per store directory.
"""

from __future__ import annotations

import logging
from hashlib import sha256
from pathlib import Path

from pydantic import ValidationError

from wardpickup.core.errors import StoreError
from wardpickup.domain.models import CollectionRecord, Household
from wardpickup.store.memory import MemoryStore

logger = logging.getLogger(__name__)


class FileStore(MemoryStore):
    def __init__(self, base_dir: Path):
        super().__init__()
        self._base_dir = Path(base_dir)
        self._households_dir = self._base_dir / "households"
        self._collections_path = self._base_dir / "collections.jsonl"
        try:
            self._households_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"Cannot create store directory {self._base_dir}: {exc}") from exc
        self._load()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _household_path(self, household_id: str) -> Path:
        digest = sha256(household_id.encode("utf-8")).hexdigest()
        return self._households_dir / f"{digest}.json"

    def _load(self) -> None:
        for path in sorted(self._households_dir.glob("*.json")):
            try:
                household = Household.model_validate_json(path.read_text(encoding="utf-8"))
            except (OSError, ValidationError) as exc:
                raise StoreError(f"Corrupt household document {path.name}: {exc}") from exc
            self._households[household.id] = household

        if self._collections_path.exists():
            with self._collections_path.open(encoding="utf-8") as fh:
                for lineno, line in enumerate(fh, start=1):
                    if not line.strip():
                        continue
                    try:
                        self._collections.append(CollectionRecord.model_validate_json(line))
                    except ValidationError as exc:
                        raise StoreError(f"Corrupt collection log line {lineno}: {exc}") from exc

        logger.info(
            "Loaded store %s: households=%d collections=%d",
            self._base_dir,
            len(self._households),
            len(self._collections),
        )

    def _persist_household(self, household: Household) -> None:
        path = self._household_path(household.id)
        tmp = path.with_suffix(".tmp")
        try:
            tmp.write_text(household.model_dump_json(), encoding="utf-8")
            tmp.replace(path)
        except OSError as exc:
            raise StoreError(f"Failed to write household {household.id}: {exc}") from exc

    def _persist_collection(self, record: CollectionRecord) -> None:
        try:
            with self._collections_path.open("a", encoding="utf-8") as fh:
                fh.write(record.model_dump_json() + "\n")
        except OSError as exc:
            raise StoreError(f"Failed to append collection {record.id}: {exc}") from exc
