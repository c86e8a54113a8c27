import copy
import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

from app.schemas.records import ALL_RECORDS, Record
from app.store.base import UNIQUE_KEYS, EntityStore, R, UniqueViolation, validate_record

logger = logging.getLogger(__name__)


class MemoryStore(EntityStore):
    """Process-local store: one dict arena per kind plus unique-key indexes."""

    backend_name = "memory"

    def __init__(self):
        self._lock = threading.RLock()
        self._rows: dict[type[Record], dict[int, Record]] = {kind: {} for kind in ALL_RECORDS}
        self._next_ids: dict[type[Record], int] = {kind: 1 for kind in ALL_RECORDS}
        # kind -> key fields -> key values -> record id
        self._indexes: dict[type[Record], dict[tuple[str, ...], dict[tuple, int]]] = {
            kind: {key: {} for key in UNIQUE_KEYS.get(kind, ())} for kind in ALL_RECORDS
        }

    def _key_values(self, record: Record, key: tuple[str, ...]) -> tuple:
        return tuple(getattr(record, field) for field in key)

    def _check_unique(self, kind: type[Record], record: Record, ignore_id: int | None = None) -> None:
        for key, index in self._indexes[kind].items():
            holder = index.get(self._key_values(record, key))
            if holder is not None and holder != ignore_id:
                raise UniqueViolation(kind, key)

    def _index(self, kind: type[Record], record: Record) -> None:
        for key, index in self._indexes[kind].items():
            index[self._key_values(record, key)] = record.id

    def _unindex(self, kind: type[Record], record: Record) -> None:
        for key, index in self._indexes[kind].items():
            index.pop(self._key_values(record, key), None)

    @staticmethod
    def _matches(record: Record, filters: Mapping[str, Any]) -> bool:
        return all(getattr(record, field) == value for field, value in filters.items())

    def create(self, kind: type[R], data: Mapping[str, Any]) -> R:
        record = validate_record(kind, {**data, "id": None})
        with self._lock:
            self._check_unique(kind, record)
            record.id = self._next_ids[kind]
            self._next_ids[kind] += 1
            self._rows[kind][record.id] = record
            self._index(kind, record)
            return record.model_copy()

    def get(self, kind: type[R], record_id: int) -> R | None:
        with self._lock:
            record = self._rows[kind].get(record_id)
            return record.model_copy() if record is not None else None

    def list(self, kind: type[R], **filters: Any) -> list[R]:
        with self._lock:
            return [
                record.model_copy()
                for record in self._rows[kind].values()
                if self._matches(record, filters)
            ]

    def find_one(self, kind: type[R], **filters: Any) -> R | None:
        key = tuple(sorted(filters))
        with self._lock:
            for fields, index in self._indexes[kind].items():
                if tuple(sorted(fields)) == key:
                    record_id = index.get(tuple(filters[field] for field in fields))
                    return self.get(kind, record_id) if record_id is not None else None
            return super().find_one(kind, **filters)

    def update(self, kind: type[R], record_id: int, changes: Mapping[str, Any]) -> R | None:
        with self._lock:
            current = self._rows[kind].get(record_id)
            if current is None:
                return None
            updated = validate_record(kind, {**current.model_dump(), **changes, "id": record_id})
            self._check_unique(kind, updated, ignore_id=record_id)
            self._unindex(kind, current)
            self._rows[kind][record_id] = updated
            self._index(kind, updated)
            return updated.model_copy()

    def delete(self, kind: type[R], record_id: int) -> bool:
        with self._lock:
            record = self._rows[kind].pop(record_id, None)
            if record is None:
                return False
            self._unindex(kind, record)
            return True

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            rows = copy.deepcopy(self._rows)
            indexes = copy.deepcopy(self._indexes)
            try:
                yield
            except BaseException:
                # id counters stay advanced so rolled back ids are never handed out again
                self._rows = rows
                self._indexes = indexes
                logger.debug("memory transaction rolled back")
                raise
