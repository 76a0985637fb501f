# Overview: In-memory TableStore used by demo mode and tests.

from __future__ import annotations

import copy
import itertools
import threading
from datetime import datetime

from billcraft.time_utils import to_utc_z, utcnow
from .base import StorageError, TableStore

PROTECTED_FIELDS = {"id", "owner_id", "created_at", "updated_at"}


def _normalize(value):
    if isinstance(value, datetime):
        return to_utc_z(value)
    return value


class MemoryTableStore(TableStore):
    """
    Dict-backed TableStore with the same record shapes as the SQL backend.

    Records are deep-copied in and out so callers never share state with
    the store. `unique` lists fields that must not repeat within one
    owner, mirroring the SQL unique constraints; a collision raises
    StorageError and leaves the store unchanged.
    """

    def __init__(
        self,
        *,
        defaults: dict | None = None,
        track_updates: bool = True,
        unique: tuple[str, ...] = (),
    ):
        self._defaults = dict(defaults or {})
        self._track_updates = track_updates
        self._unique = tuple(unique)
        self._rows: dict[int, dict] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _owned(self, owner_id: int) -> list[dict]:
        return [row for row in self._rows.values() if row["owner_id"] == owner_id]

    def _check_unique(self, candidate: dict) -> None:
        for key in self._unique:
            value = candidate.get(key)
            if value is None:
                continue
            for row in self._owned(candidate["owner_id"]):
                if row["id"] != candidate.get("id") and row.get(key) == value:
                    raise StorageError(f"duplicate {key}: {value}")

    def list(self, owner_id: int, *, order_by: str | None = None, descending: bool = False) -> list[dict]:
        key = order_by or "id"
        with self._lock:
            rows = sorted(
                self._owned(owner_id),
                key=lambda r: (r.get(key) is not None, r.get(key), r["id"]),
                reverse=descending,
            )
            return copy.deepcopy(rows)

    def find(self, owner_id: int, **filters) -> list[dict]:
        with self._lock:
            rows = [
                row for row in self._owned(owner_id)
                if all(row.get(k) == v for k, v in filters.items())
            ]
            rows.sort(key=lambda r: r["id"])
            return copy.deepcopy(rows)

    def get(self, owner_id: int, record_id: int) -> dict | None:
        with self._lock:
            row = self._rows.get(record_id)
            if row is None or row["owner_id"] != owner_id:
                return None
            return copy.deepcopy(row)

    def insert(self, owner_id: int, record: dict) -> dict:
        with self._lock:
            row = copy.deepcopy(self._defaults)
            row.update({k: _normalize(copy.deepcopy(v)) for k, v in record.items() if k not in {"id", "owner_id"}})
            row["owner_id"] = owner_id
            self._check_unique(row)
            row["id"] = next(self._ids)
            now = to_utc_z(utcnow())
            row.setdefault("created_at", now)
            if self._track_updates:
                row["updated_at"] = now
            self._rows[row["id"]] = row
            return copy.deepcopy(row)

    def update(self, owner_id: int, record_id: int, patch: dict) -> dict | None:
        with self._lock:
            row = self._rows.get(record_id)
            if row is None or row["owner_id"] != owner_id:
                return None
            changes = {k: _normalize(copy.deepcopy(v)) for k, v in patch.items() if k not in PROTECTED_FIELDS}
            self._check_unique({**row, **changes})
            row.update(changes)
            if self._track_updates:
                row["updated_at"] = to_utc_z(utcnow())
            return copy.deepcopy(row)

    def delete(self, owner_id: int, record_id: int) -> bool:
        with self._lock:
            row = self._rows.get(record_id)
            if row is None or row["owner_id"] != owner_id:
                return False
            del self._rows[record_id]
            return True
