"""Job endpoints - post, browse and search jobs."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_current_principal, get_optional_principal, get_workflow
from app.core.security import Principal
from app.schemas.application import ApplicationResponse
from app.schemas.common import APIResponse, ok
from app.schemas.job import JobCreate, JobPage, JobResponse, JobSearchFilters, JobUpdate
from app.services.workflow import MarketplaceWorkflow
from app.utils.constants import (
    Department,
    EmploymentType,
    InstituteType,
    JobLevel,
    JobSort,
    PostedWithin,
)

router = APIRouter()


@router.get("", response_model=APIResponse[JobPage])
async def search_jobs(
    query: Optional[str] = Query(None, description="Matches title, description, qualifications and skills"),
    department: Optional[Department] = Query(None),
    institute_type: Optional[InstituteType] = Query(None),
    level: Optional[JobLevel] = Query(None),
    location: Optional[str] = Query(None, description="Matches city, state or country"),
    employment_type: Optional[EmploymentType] = Query(None),
    posted_within: PostedWithin = Query(PostedWithin.ALL),
    sort_by: JobSort = Query(JobSort.NEWEST),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, description="Items per page (capped at 100)"),
    principal: Optional[Principal] = Depends(get_optional_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """
    Search approved jobs.

    **Filters:**
    - `query`: case-insensitive text match
    - `department`, `institute_type`, `level`, `employment_type`: exact match
    - `location`: city, state or country (partial match)
    - `posted_within`: 24h, 7d, 30d, all

    **Sorting:**
    - `sort_by`: newest, deadline, salary_high, salary_low

    **Examples:**
    ```
    GET /api/v1/jobs?department=Mathematics&sort_by=deadline
    GET /api/v1/jobs?query=topology&location=Pune&page=2&limit=10
    ```
    """
    filters = JobSearchFilters(
        query=query,
        department=department,
        institute_type=institute_type,
        level=level,
        location=location,
        employment_type=employment_type,
        posted_within=posted_within,
        sort_by=sort_by,
        page=page,
        limit=limit,
    )
    return ok(await workflow.search_jobs(principal, filters))


@router.get("/featured", response_model=APIResponse[List[JobResponse]])
async def featured_jobs(
    limit: int = Query(6, ge=1, le=20),
    principal: Optional[Principal] = Depends(get_optional_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Most recently posted approved jobs."""
    return ok(await workflow.list_featured_jobs(principal, limit))


@router.get("/mine", response_model=APIResponse[List[JobResponse]])
async def my_jobs(
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Jobs posted by the caller, newest first, in every status."""
    return ok(await workflow.list_jobs_by_poster(principal))


@router.post("", response_model=APIResponse[JobResponse], status_code=status.HTTP_201_CREATED)
async def create_job(
    payload: JobCreate,
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Post a job for the caller's approved institution. It starts pending review."""
    return ok(await workflow.create_job(principal, payload), "Job submitted for review")


@router.get("/{job_id}", response_model=APIResponse[JobResponse])
async def get_job(
    job_id: str,
    principal: Optional[Principal] = Depends(get_optional_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Get job details. Unpublished jobs are visible to their poster and admins only."""
    return ok(await workflow.get_job(principal, job_id))


@router.put("/{job_id}", response_model=APIResponse[JobResponse])
async def update_job(
    job_id: str,
    payload: JobUpdate,
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Edit a job while it is still pending review."""
    return ok(await workflow.update_job(principal, job_id, payload), "Job updated")


@router.delete("/{job_id}", response_model=APIResponse[int])
async def delete_job(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Delete a job and its applications. Returns the number of applications removed."""
    removed = await workflow.delete_job(principal, job_id)
    return ok(removed, "Job deleted")


@router.get("/{job_id}/applications", response_model=APIResponse[List[ApplicationResponse]])
async def job_applications(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Applications received for a job (poster or admin)."""
    return ok(await workflow.list_job_applications(principal, job_id))
