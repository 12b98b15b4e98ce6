"""Tests for job search."""

from datetime import timedelta

import pytest

from app.repositories.base import Collection
from app.schemas.job import JobSearchFilters
from app.services.search import JobSearchEngine, clamp_limit, matches_location, matches_query
from app.utils.helpers import utcnow

NOW = utcnow()


def job(**overrides):
    record = {
        "title": "Assistant Professor",
        "department": "Mathematics",
        "level": "Assistant Professor",
        "institute_type": "IIT",
        "employment_type": "Full-time",
        "location": {"city": "Chennai", "state": "Tamil Nadu", "country": "India"},
        "description": "Research and teaching in the department.",
        "qualifications": [],
        "skills": [],
        "min_salary": None,
        "max_salary": None,
        "last_date": NOW + timedelta(days=30),
        "status": "approved",
        "created_at": NOW - timedelta(days=1),
    }
    record.update(overrides)
    return record


@pytest.fixture
def engine(store):
    return JobSearchEngine(store)


async def seed(store, *records):
    return [await store.create(Collection.JOBS, record) for record in records]


class TestFilters:
    async def test_only_approved_jobs_are_returned(self, store, engine):
        await seed(
            store,
            job(title="Open"),
            job(title="Waiting", status="pending"),
            job(title="Closed", status="expired"),
            job(title="Refused", status="rejected"),
        )
        result = await engine.search(JobSearchFilters(), now=NOW)
        assert [j["title"] for j in result["items"]] == ["Open"]
        assert result["total"] == 1

    async def test_department_filter_with_deadline_sort(self, store, engine):
        await seed(
            store,
            *[
                job(title=f"Maths {i}", last_date=NOW + timedelta(days=(i * 7) % 45 + 1))
                for i in range(45)
            ],
            job(title="Physics opening", department="Physics", last_date=NOW + timedelta(hours=1)),
            job(title="Maths pending", status="pending", last_date=NOW + timedelta(hours=2)),
        )

        filters = dict(department="Mathematics", sort_by="deadline", limit=20)
        pages = [
            await engine.search(JobSearchFilters(page=page, **filters), now=NOW) for page in (1, 2, 3)
        ]
        collected = [j for page in pages for j in page["items"]]

        assert all(j["department"] == "Mathematics" and j["status"] == "approved" for j in collected)
        assert [len(page["items"]) for page in pages] == [20, 20, 5]
        assert len({j["id"] for j in collected}) == 45
        deadlines = [j["last_date"] for j in collected]
        assert deadlines == sorted(deadlines)
        assert [page["has_more"] for page in pages] == [True, True, False]
        assert pages[0]["total"] == 45

    async def test_text_query_matches_any_text_field(self, store, engine):
        await seed(
            store,
            job(title="Professor of Topology"),
            job(title="Lecturer", skills=["Algebraic TOPOLOGY"]),
            job(title="Reader", qualifications=["PhD in topology or geometry"]),
            job(title="Analyst", description="Numerical analysis"),
        )
        result = await engine.search(JobSearchFilters(query="topology"), now=NOW)
        assert {j["title"] for j in result["items"]} == {"Professor of Topology", "Lecturer", "Reader"}

    async def test_location_matches_city_state_or_country(self, store, engine):
        await seed(
            store,
            job(title="A", location={"city": "Pune", "state": "Maharashtra", "country": "India"}),
            job(title="B", location={"city": "Mumbai", "state": "Maharashtra", "country": "India"}),
            job(title="C", location={"city": "Delhi", "state": "Delhi", "country": "India"}),
        )
        result = await engine.search(JobSearchFilters(location="maharashtra"), now=NOW)
        assert {j["title"] for j in result["items"]} == {"A", "B"}

    async def test_posted_within_window(self, store, engine):
        await seed(
            store,
            job(title="Today", created_at=NOW - timedelta(hours=3)),
            job(title="This week", created_at=NOW - timedelta(days=5)),
            job(title="Old", created_at=NOW - timedelta(days=60)),
        )
        day = await engine.search(JobSearchFilters(posted_within="24h"), now=NOW)
        week = await engine.search(JobSearchFilters(posted_within="7d"), now=NOW)
        everything = await engine.search(JobSearchFilters(posted_within="all"), now=NOW)

        assert [j["title"] for j in day["items"]] == ["Today"]
        assert {j["title"] for j in week["items"]} == {"Today", "This week"}
        assert everything["total"] == 3


class TestSorting:
    async def test_newest_first(self, store, engine):
        await seed(
            store,
            job(title="Older", created_at=NOW - timedelta(days=3)),
            job(title="Newer", created_at=NOW - timedelta(days=1)),
        )
        result = await engine.search(JobSearchFilters(sort_by="newest"), now=NOW)
        assert [j["title"] for j in result["items"]] == ["Newer", "Older"]

    async def test_salary_sorts_treat_missing_as_zero(self, store, engine):
        await seed(
            store,
            job(title="Unpaid listing"),
            job(title="Mid", min_salary=60000, max_salary=90000),
            job(title="Top", min_salary=120000, max_salary=200000),
        )
        high = await engine.search(JobSearchFilters(sort_by="salary_high"), now=NOW)
        low = await engine.search(JobSearchFilters(sort_by="salary_low"), now=NOW)

        assert [j["title"] for j in high["items"]] == ["Top", "Mid", "Unpaid listing"]
        assert [j["title"] for j in low["items"]] == ["Unpaid listing", "Mid", "Top"]

    async def test_ties_keep_creation_order(self, store, engine):
        deadline = NOW + timedelta(days=3)
        await seed(store, *[job(title=f"Tie {i}", last_date=deadline) for i in range(5)])
        result = await engine.search(JobSearchFilters(sort_by="deadline"), now=NOW)
        assert [j["title"] for j in result["items"]] == [f"Tie {i}" for i in range(5)]


class TestPaging:
    def test_limit_is_clamped(self):
        assert clamp_limit(500) == 100
        assert clamp_limit(None) == 20
        assert clamp_limit(7) == 7

    async def test_page_past_the_end_is_empty(self, store, engine):
        await seed(store, job())
        result = await engine.search(JobSearchFilters(page=4, limit=10), now=NOW)
        assert result["items"] == []
        assert result["total"] == 1
        assert result["has_more"] is False

    async def test_featured_returns_newest_approved(self, store, engine):
        await seed(
            store,
            *[job(title=f"Job {i}", created_at=NOW - timedelta(hours=10 - i)) for i in range(8)],
            job(title="Pending", status="pending", created_at=NOW),
        )
        featured = await engine.featured()
        assert [j["title"] for j in featured] == [f"Job {i}" for i in range(7, 1, -1)]


def test_matchers_ignore_blank_needles():
    assert matches_query(job(), "   ")
    assert matches_location(job(), "")
    assert not matches_location(job(), "Kolkata")
