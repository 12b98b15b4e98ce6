"""Admin endpoints - moderation queues, audit log and user removal."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_current_principal, get_workflow
from app.core.security import Principal
from app.schemas.admin import AuditLogResponse, UserDeletedResponse
from app.schemas.common import APIResponse, ok
from app.schemas.company import CompanyResponse, CompanyStatusUpdate
from app.schemas.job import JobResponse, JobStatusUpdate
from app.services.workflow import MarketplaceWorkflow
from app.utils.constants import AUDIT_LOG_DEFAULT_LIMIT, AuditAction

router = APIRouter()


# ==================== Companies ====================

@router.get("/companies/pending", response_model=APIResponse[List[CompanyResponse]])
async def pending_companies(
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Institutions waiting for review, oldest first."""
    return ok(await workflow.list_pending_companies(principal))


@router.patch("/companies/{company_id}/status", response_model=APIResponse[CompanyResponse])
async def moderate_company(
    company_id: str,
    payload: CompanyStatusUpdate,
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Approve or reject a pending institution. Approval makes the owner an employer."""
    if payload.status == "approved":
        company = await workflow.approve_company(principal, company_id)
    else:
        company = await workflow.reject_company(principal, company_id, payload.reason)
    return ok(company, f"Institution {payload.status}")


# ==================== Jobs ====================

@router.get("/jobs/pending", response_model=APIResponse[List[JobResponse]])
async def pending_jobs(
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Jobs waiting for review, oldest first."""
    return ok(await workflow.list_pending_jobs(principal))


@router.patch("/jobs/{job_id}/status", response_model=APIResponse[JobResponse])
async def moderate_job(
    job_id: str,
    payload: JobStatusUpdate,
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Approve or reject a pending job."""
    if payload.status == "approved":
        job = await workflow.approve_job(principal, job_id)
    else:
        job = await workflow.reject_job(principal, job_id, payload.reason)
    return ok(job, f"Job {payload.status}")


# ==================== Audit & Users ====================

@router.get("/audit-logs", response_model=APIResponse[List[AuditLogResponse]])
async def audit_logs(
    limit: int = Query(AUDIT_LOG_DEFAULT_LIMIT, ge=1, le=100),
    action: Optional[AuditAction] = Query(None, description="Filter by action"),
    target_id: Optional[str] = Query(None, description="Filter by target id"),
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Most recent audit entries."""
    logs = await workflow.list_audit_logs(
        principal, limit=limit, action=action.value if action else None, target_id=target_id
    )
    return ok(logs)


@router.delete("/users/{uid}", response_model=APIResponse[UserDeletedResponse])
async def delete_user(
    uid: str,
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Delete a user with their company, jobs and applications."""
    return ok(await workflow.delete_user(principal, uid), "User deleted")
