"""Tests for the in-memory entity store."""

import asyncio

import pytest

from app.core.exceptions import AlreadyExists, NotFound, PermissionDenied
from app.repositories.base import Collection, Filter, Sort, eq
from app.repositories.memory_store import InMemoryStore


@pytest.fixture
def store():
    return InMemoryStore()


async def test_create_assigns_id_and_timestamps(store):
    record = await store.create(Collection.USERS, {"email": "a@example.com", "role": "seeker"})

    assert record["id"]
    assert record["created_at"] is not None
    assert record["updated_at"] is not None
    assert await store.get(Collection.USERS, record["id"]) == record


async def test_returned_records_are_copies(store):
    record = await store.create(Collection.JOBS, {"title": "Lecturer", "skills": ["Teaching"]})
    record["skills"].append("Research")

    stored = await store.get(Collection.JOBS, record["id"])
    assert stored["skills"] == ["Teaching"]


async def test_get_missing_raises_not_found(store):
    with pytest.raises(NotFound):
        await store.get(Collection.JOBS, "missing")


async def test_unique_fields_are_enforced(store):
    await store.create(Collection.APPLICATIONS, {"dedupe_key": "job-1_user-1"})
    with pytest.raises(AlreadyExists):
        await store.create(Collection.APPLICATIONS, {"dedupe_key": "job-1_user-1"})


async def test_explicit_id_conflict(store):
    await store.create(Collection.USERS, {"id": "uid-1", "email": "a@example.com"})
    with pytest.raises(AlreadyExists):
        await store.create(Collection.USERS, {"id": "uid-1", "email": "b@example.com"})


async def test_query_filters_sort_and_offset(store):
    for salary in (300, 100, 200, None):
        await store.create(Collection.JOBS, {"status": "approved", "max_salary": salary})
    await store.create(Collection.JOBS, {"status": "pending", "max_salary": 999})

    approved = await store.query(
        Collection.JOBS, [eq("status", "approved")], sort=[Sort("max_salary", descending=True)]
    )
    assert [job["max_salary"] for job in approved] == [300, 200, 100, None]

    page = await store.query(
        Collection.JOBS, [eq("status", "approved")], sort=[Sort("max_salary")], limit=2, offset=1
    )
    assert [job["max_salary"] for job in page] == [200, 300]

    assert await store.count(Collection.JOBS, [Filter("max_salary", "gt", 150)]) == 3
    assert await store.count(Collection.JOBS, [Filter("status", "in", ["pending"])]) == 1


async def test_find_one_returns_first_in_creation_order(store):
    first = await store.create(Collection.JOBS, {"status": "approved"})
    await store.create(Collection.JOBS, {"status": "approved"})

    assert (await store.find_one(Collection.JOBS, status="approved"))["id"] == first["id"]
    assert await store.find_one(Collection.JOBS, status="expired") is None


async def test_increment(store):
    job = await store.create(Collection.JOBS, {"view_count": 0})
    await store.increment(Collection.JOBS, job["id"], "view_count")
    updated = await store.increment(Collection.JOBS, job["id"], "view_count", 2)
    assert updated["view_count"] == 3


async def test_concurrent_increments_are_not_lost(store):
    job = await store.create(Collection.JOBS, {"application_count": 0})
    await asyncio.gather(
        *[store.increment(Collection.JOBS, job["id"], "application_count") for _ in range(25)]
    )
    assert (await store.get(Collection.JOBS, job["id"]))["application_count"] == 25


async def test_update_keeps_identity_fields(store):
    job = await store.create(Collection.JOBS, {"status": "pending"})
    updated = await store.update(
        Collection.JOBS, job["id"], {"status": "approved", "id": "other", "created_at": None}
    )
    assert updated["id"] == job["id"]
    assert updated["created_at"] == job["created_at"]
    assert updated["status"] == "approved"


async def test_audit_logs_are_append_only(store):
    entry = await store.create(Collection.AUDIT_LOGS, {"action": "job_approved", "target_id": "job-1"})

    with pytest.raises(PermissionDenied):
        await store.update(Collection.AUDIT_LOGS, entry["id"], {"action": "job_rejected"})
    with pytest.raises(PermissionDenied):
        await store.delete(Collection.AUDIT_LOGS, entry["id"])
    assert await store.count(Collection.AUDIT_LOGS) == 1


class TestTransactions:
    async def test_failed_transaction_rolls_back_every_write(self, store):
        job = await store.create(Collection.JOBS, {"application_count": 0})

        with pytest.raises(AlreadyExists):
            async with store.transaction():
                await store.create(Collection.APPLICATIONS, {"dedupe_key": "k"})
                await store.increment(Collection.JOBS, job["id"], "application_count")
                await store.create(Collection.APPLICATIONS, {"dedupe_key": "k"})

        assert await store.count(Collection.APPLICATIONS) == 0
        assert (await store.get(Collection.JOBS, job["id"]))["application_count"] == 0

    async def test_committed_transaction_is_visible(self, store):
        async with store.transaction():
            await store.create(Collection.USERS, {"id": "u1", "email": "u1@example.com"})
            await store.create(Collection.AUDIT_LOGS, {"action": "user_created", "target_id": "u1"})

        assert await store.count(Collection.USERS) == 1
        assert await store.count(Collection.AUDIT_LOGS) == 1

    async def test_nested_transactions_join_the_outer_one(self, store):
        with pytest.raises(RuntimeError):
            async with store.transaction():
                async with store.transaction():
                    await store.create(Collection.USERS, {"email": "inner@example.com"})
                raise RuntimeError("outer failure")

        assert await store.count(Collection.USERS) == 0

    async def test_transactions_are_serialised(self, store):
        await store.create(Collection.JOBS, {"id": "job-1", "application_count": 0})

        async def apply(uid):
            async with store.transaction():
                await store.create(Collection.APPLICATIONS, {"dedupe_key": "job-1_same"})
                await asyncio.sleep(0)
                await store.increment(Collection.JOBS, "job-1", "application_count")

        results = await asyncio.gather(apply("a"), apply("b"), return_exceptions=True)

        assert sum(1 for result in results if isinstance(result, AlreadyExists)) == 1
        assert (await store.get(Collection.JOBS, "job-1"))["application_count"] == 1
