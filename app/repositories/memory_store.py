"""In-memory entity store used for tests and local development."""

import asyncio
import copy
import logging
import operator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any, Dict, List, Optional, Sequence

from app.core.exceptions import AlreadyExists, NotFound, PermissionDenied
from app.repositories.base import (
    APPEND_ONLY,
    UNIQUE_FIELDS,
    Collection,
    EntityStore,
    Filter,
    Record,
    Sort,
)
from app.utils.helpers import new_id, utcnow

logger = logging.getLogger(__name__)

# Store whose transaction the current task is running inside
_active_transaction: ContextVar[Optional["InMemoryStore"]] = ContextVar(
    "memory_store_transaction", default=None
)

_OPERATORS = {
    "eq": operator.eq,
    "ne": operator.ne,
    "lt": operator.lt,
    "le": operator.le,
    "gt": operator.gt,
    "ge": operator.ge,
    "in": lambda value, options: value in options,
}


def _matches(record: Record, filters: Sequence[Filter]) -> bool:
    for condition in filters:
        value = record.get(condition.field)
        if value is None and condition.op not in ("eq", "ne"):
            return False
        if not _OPERATORS[condition.op](value, condition.value):
            return False
    return True


class InMemoryStore(EntityStore):
    """
    Dict-backed store.

    All access is serialised by one asyncio.Lock. A transaction holds the lock
    for its whole body and restores a snapshot of every collection if the body
    raises, so a failed multi-write leaves no partial state behind.
    """

    def __init__(self):
        self._data: Dict[Collection, Dict[str, Record]] = {c: {} for c in Collection}
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def _guard(self):
        if _active_transaction.get() is self:
            yield
            return
        async with self._lock:
            yield

    @asynccontextmanager
    async def transaction(self):
        if _active_transaction.get() is self:
            # Nested blocks join the outer transaction
            yield self
            return

        async with self._lock:
            snapshot = copy.deepcopy(self._data)
            token = _active_transaction.set(self)
            try:
                yield self
            except BaseException:
                self._data = snapshot
                logger.debug("In-memory transaction rolled back")
                raise
            finally:
                _active_transaction.reset(token)

    def _table(self, collection: Collection) -> Dict[str, Record]:
        return self._data[Collection(collection)]

    def _check_unique(self, collection: Collection, record: Record, exclude_id: str = None):
        for field in UNIQUE_FIELDS.get(Collection(collection), ()):
            value = record.get(field)
            if value is None:
                continue
            for existing in self._table(collection).values():
                if existing["id"] != exclude_id and existing.get(field) == value:
                    raise AlreadyExists(f"{collection.value} with this {field} already exists")

    def _check_writable(self, collection: Collection):
        if Collection(collection) in APPEND_ONLY:
            raise PermissionDenied(f"{collection.value} records are immutable")

    def _require(self, collection: Collection, record_id: str) -> Record:
        record = self._table(collection).get(record_id)
        if record is None:
            raise NotFound(f"{Collection(collection).value} record {record_id} not found")
        return record

    async def get(self, collection: Collection, record_id: str) -> Record:
        async with self._guard():
            return copy.deepcopy(self._require(collection, record_id))

    async def find_one(self, collection: Collection, **equals: Any) -> Optional[Record]:
        filters = [Filter(field, "eq", value) for field, value in equals.items()]
        records = await self.query(collection, filters, limit=1)
        return records[0] if records else None

    async def query(
        self,
        collection: Collection,
        filters: Sequence[Filter] = (),
        sort: Sequence[Sort] = (),
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Record]:
        async with self._guard():
            records = [r for r in self._table(collection).values() if _matches(r, filters)]

            # Apply keys last-to-first; sorted() is stable so earlier keys win
            for key in reversed(list(sort)):
                present = [r for r in records if r.get(key.field) is not None]
                missing = [r for r in records if r.get(key.field) is None]
                present.sort(key=lambda r: r[key.field], reverse=key.descending)
                records = present + missing

            end = None if limit is None else offset + limit
            return copy.deepcopy(records[offset:end])

    async def count(self, collection: Collection, filters: Sequence[Filter] = ()) -> int:
        async with self._guard():
            return sum(1 for r in self._table(collection).values() if _matches(r, filters))

    async def create(self, collection: Collection, data: Record) -> Record:
        async with self._guard():
            now = utcnow()
            record = copy.deepcopy(data)
            record["id"] = record.get("id") or new_id()
            record.setdefault("created_at", now)
            record["updated_at"] = now

            if record["id"] in self._table(collection):
                raise AlreadyExists(f"{collection.value} record {record['id']} already exists")
            self._check_unique(collection, record)

            self._table(collection)[record["id"]] = record
            return copy.deepcopy(record)

    async def update(self, collection: Collection, record_id: str, changes: Record) -> Record:
        async with self._guard():
            self._check_writable(collection)
            record = self._require(collection, record_id)
            candidate = {**record, **copy.deepcopy(changes)}
            candidate["id"] = record_id
            candidate["created_at"] = record["created_at"]
            candidate["updated_at"] = utcnow()
            self._check_unique(collection, candidate, exclude_id=record_id)
            self._table(collection)[record_id] = candidate
            return copy.deepcopy(candidate)

    async def increment(
        self, collection: Collection, record_id: str, field: str, amount: int = 1
    ) -> Record:
        async with self._guard():
            self._check_writable(collection)
            record = self._require(collection, record_id)
            record[field] = (record.get(field) or 0) + amount
            record["updated_at"] = utcnow()
            return copy.deepcopy(record)

    async def delete(self, collection: Collection, record_id: str) -> None:
        async with self._guard():
            self._check_writable(collection)
            self._require(collection, record_id)
            del self._table(collection)[record_id]
