"""
Job search and filtering.

Equality filters and the recency window are pushed down to the entity
store; text and location matching, sorting and pagination run here over the
store's creation-ordered result. Every sort is stable, so jobs with equal
sort keys keep creation order and repeated calls page identically.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from app.config import settings
from app.repositories.base import Collection, EntityStore, Filter, eq
from app.schemas.job import JobSearchFilters
from app.utils.constants import POSTED_WITHIN_DAYS, JobSort, JobStatus, PostedWithin
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "description", "qualifications", "skills")
LOCATION_FIELDS = ("city", "state", "country")


def clamp_limit(limit: Optional[int]) -> int:
    """Page size within [1, MAX_PAGE_SIZE], DEFAULT_PAGE_SIZE when unset."""
    if not limit:
        return settings.DEFAULT_PAGE_SIZE
    return max(1, min(int(limit), settings.MAX_PAGE_SIZE))


def _text_of(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return "" if value is None else str(value)


def matches_query(job: Dict[str, Any], query: str) -> bool:
    """Case-insensitive substring match on any of the text fields."""
    needle = query.strip().lower()
    if not needle:
        return True
    return any(needle in _text_of(job.get(field)).lower() for field in TEXT_FIELDS)


def matches_location(job: Dict[str, Any], location: str) -> bool:
    needle = location.strip().lower()
    if not needle:
        return True
    place = job.get("location") or {}
    return any(needle in str(place.get(field) or "").lower() for field in LOCATION_FIELDS)


def sort_jobs(jobs: List[Dict[str, Any]], sort_by: str) -> List[Dict[str, Any]]:
    """Stable sort; ``jobs`` must already be in creation order."""
    sort_by = JobSort(sort_by)
    if sort_by == JobSort.NEWEST:
        return sorted(jobs, key=lambda j: j["created_at"], reverse=True)
    if sort_by == JobSort.DEADLINE:
        return sorted(jobs, key=lambda j: j["last_date"])
    if sort_by == JobSort.SALARY_HIGH:
        return sorted(jobs, key=lambda j: j.get("max_salary") or 0, reverse=True)
    return sorted(jobs, key=lambda j: j.get("min_salary") or 0)


class JobSearchEngine:
    """Filter, sort and paginate approved jobs."""

    def __init__(self, store: EntityStore):
        self.store = store

    def _store_filters(self, filters: JobSearchFilters, now: datetime) -> List[Filter]:
        conditions = [eq("status", JobStatus.APPROVED.value)]
        for field in ("department", "institute_type", "level", "employment_type"):
            value = getattr(filters, field)
            if value:
                conditions.append(eq(field, value))

        window = PostedWithin(filters.posted_within)
        if window != PostedWithin.ALL:
            cutoff = now - timedelta(days=POSTED_WITHIN_DAYS[window])
            conditions.append(Filter("created_at", "ge", cutoff))
        return conditions

    async def search(self, filters: JobSearchFilters, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Run a search.

        Returns:
            Dict with items, total, page, limit and has_more
        """
        now = now or utcnow()
        limit = clamp_limit(filters.limit)
        page = max(1, filters.page)

        jobs = await self.store.query(Collection.JOBS, self._store_filters(filters, now))

        if filters.query:
            jobs = [job for job in jobs if matches_query(job, filters.query)]
        if filters.location:
            jobs = [job for job in jobs if matches_location(job, filters.location)]

        jobs = sort_jobs(jobs, filters.sort_by)

        total = len(jobs)
        start = (page - 1) * limit
        items = jobs[start:start + limit]

        logger.debug(f"Job search matched {total} jobs (page {page}, limit {limit})")
        return {
            "items": items,
            "total": total,
            "page": page,
            "limit": limit,
            "has_more": start + limit < total,
        }

    async def featured(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Most recently created approved jobs."""
        limit = max(1, min(limit or settings.FEATURED_JOBS_LIMIT, 20))
        jobs = await self.store.query(Collection.JOBS, [eq("status", JobStatus.APPROVED.value)])
        return sort_jobs(jobs, JobSort.NEWEST)[:limit]
