"""SQLAlchemy (async) entity store."""

import copy
import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import AlreadyExists, InvalidArgument, NotFound, PermissionDenied
from app.models import Application, AuditLog, Company, Job, User
from app.repositories.base import (
    APPEND_ONLY,
    Collection,
    EntityStore,
    Filter,
    Record,
    Sort,
)
from app.utils.helpers import ensure_utc, new_id, utcnow

logger = logging.getLogger(__name__)

MODELS = {
    Collection.USERS: User,
    Collection.COMPANIES: Company,
    Collection.JOBS: Job,
    Collection.APPLICATIONS: Application,
    Collection.AUDIT_LOGS: AuditLog,
}

# (store, session) of the transaction the current task is running inside
_active_session: ContextVar[Optional[Tuple["SQLAlchemyStore", AsyncSession]]] = ContextVar(
    "sql_store_session", default=None
)


def _to_record(instance) -> Record:
    """Convert a model instance into a plain dict."""
    record = {}
    for attr in instance.__mapper__.column_attrs:
        value = getattr(instance, attr.key)
        if isinstance(value, datetime):
            value = ensure_utc(value)
        record[attr.key] = copy.deepcopy(value)
    return record


def _condition(model, condition: Filter):
    column = getattr(model, condition.field)
    if condition.op == "eq":
        return column.is_(None) if condition.value is None else column == condition.value
    if condition.op == "ne":
        return column.is_not(None) if condition.value is None else column != condition.value
    if condition.op == "lt":
        return column < condition.value
    if condition.op == "le":
        return column <= condition.value
    if condition.op == "gt":
        return column > condition.value
    if condition.op == "ge":
        return column >= condition.value
    return column.in_(list(condition.value))


class SQLAlchemyStore(EntityStore):
    """
    Entity store over an AsyncSession factory.

    Outside a transaction every call runs in its own session and commits
    immediately. Inside ``transaction()`` all calls share one session that
    commits once on exit, so inserts, counter updates and audit rows land
    together or not at all.
    """

    def __init__(self, session_factory: async_sessionmaker, engine=None):
        self._session_factory = session_factory
        self._engine = engine

    @asynccontextmanager
    async def _session(self):
        current = _active_session.get()
        if current is not None and current[0] is self:
            yield current[1]
            return

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    @asynccontextmanager
    async def transaction(self):
        current = _active_session.get()
        if current is not None and current[0] is self:
            yield self
            return

        async with self._session_factory() as session:
            token = _active_session.set((self, session))
            try:
                yield self
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                _active_session.reset(token)

    async def _flush(self, session: AsyncSession, collection: Collection):
        try:
            await session.flush()
        except IntegrityError as exc:
            detail = str(exc.orig).lower()
            if "not null" in detail or "not-null" in detail:
                raise InvalidArgument(f"{collection.value} record is missing a required field") from exc
            logger.info("Unique constraint violated on %s: %s", collection.value, exc.orig)
            raise AlreadyExists(f"{collection.value} record already exists") from exc

    async def _load(self, session: AsyncSession, collection: Collection, record_id: str):
        instance = await session.get(MODELS[collection], record_id)
        if instance is None:
            raise NotFound(f"{collection.value} record {record_id} not found")
        return instance

    def _check_writable(self, collection: Collection):
        if collection in APPEND_ONLY:
            raise PermissionDenied(f"{collection.value} records are immutable")

    async def get(self, collection: Collection, record_id: str) -> Record:
        async with self._session() as session:
            return _to_record(await self._load(session, collection, record_id))

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
        model = MODELS[collection]
        stmt = select(model).where(*[_condition(model, f) for f in filters])

        order_by = []
        for key in sort:
            column = getattr(model, key.field)
            order_by.append(column.desc().nulls_last() if key.descending else column.asc().nulls_last())
        order_by.extend([model.created_at.asc(), model.id.asc()])
        stmt = stmt.order_by(*order_by)

        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._session() as session:
            result = await session.execute(stmt)
            return [_to_record(instance) for instance in result.scalars().all()]

    async def count(self, collection: Collection, filters: Sequence[Filter] = ()) -> int:
        model = MODELS[collection]
        stmt = select(func.count()).select_from(model).where(
            *[_condition(model, f) for f in filters]
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return result.scalar_one()

    async def create(self, collection: Collection, data: Record) -> Record:
        now = utcnow()
        values = copy.deepcopy(data)
        values["id"] = values.get("id") or new_id()
        values.setdefault("created_at", now)
        values["updated_at"] = now

        async with self._session() as session:
            instance = MODELS[collection](**values)
            session.add(instance)
            await self._flush(session, collection)
            return _to_record(instance)

    async def update(self, collection: Collection, record_id: str, changes: Record) -> Record:
        self._check_writable(collection)
        async with self._session() as session:
            instance = await self._load(session, collection, record_id)
            for key, value in changes.items():
                if key in ("id", "created_at"):
                    continue
                setattr(instance, key, copy.deepcopy(value))
            instance.updated_at = utcnow()
            await self._flush(session, collection)
            return _to_record(instance)

    async def increment(
        self, collection: Collection, record_id: str, field: str, amount: int = 1
    ) -> Record:
        self._check_writable(collection)
        model = MODELS[collection]
        column = getattr(model, field)
        stmt = (
            update(model)
            .where(model.id == record_id)
            .values({field: column + amount, "updated_at": utcnow()})
            .execution_options(synchronize_session=False)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise NotFound(f"{collection.value} record {record_id} not found")
            instance = await session.get(model, record_id, populate_existing=True)
            return _to_record(instance)

    async def delete(self, collection: Collection, record_id: str) -> None:
        self._check_writable(collection)
        async with self._session() as session:
            instance = await self._load(session, collection, record_id)
            await session.delete(instance)
            await session.flush()

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
