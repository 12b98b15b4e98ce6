"""Application endpoints - apply, track and review applications."""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile, status

from app.api.deps import get_current_principal, get_workflow
from app.core.security import Principal
from app.schemas.application import (
    ApplicationCreate,
    ApplicationResponse,
    ApplicationStatusUpdate,
    ResumeUploadResponse,
    SignedUrlResponse,
)
from app.schemas.common import APIResponse, ok
from app.services.workflow import MarketplaceWorkflow

router = APIRouter()


@router.post("/resume", response_model=APIResponse[ResumeUploadResponse], status_code=status.HTTP_201_CREATED)
async def upload_resume(
    file: UploadFile = File(..., description="Resume (pdf, doc or docx)"),
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Upload a resume. Pass the returned path as `resume_path` when applying."""
    content = await file.read()
    return ok(await workflow.upload_resume(principal, file.filename or "", content), "Resume uploaded")


@router.post("", response_model=APIResponse[ApplicationResponse], status_code=status.HTTP_201_CREATED)
async def apply(
    payload: ApplicationCreate,
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """
    Apply to a job.

    Fails with `duplicate_application` when the caller already applied, and
    with `failed_precondition` when the job is closed or past its deadline.
    """
    return ok(await workflow.create_application(principal, payload), "Application submitted")


@router.get("/me", response_model=APIResponse[List[ApplicationResponse]])
async def my_applications(
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """The caller's applications, newest first."""
    return ok(await workflow.list_my_applications(principal))


@router.patch("/{application_id}/status", response_model=APIResponse[ApplicationResponse])
async def update_status(
    application_id: str,
    payload: ApplicationStatusUpdate,
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Set an application's review status (job poster or admin)."""
    application = await workflow.update_application_status(
        principal, application_id, payload.status, payload.notes
    )
    return ok(application, "Application status updated")


@router.get("/{application_id}/resume-url", response_model=APIResponse[SignedUrlResponse])
async def resume_url(
    application_id: str,
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Short-lived download link for the applicant's resume."""
    return ok(await workflow.get_resume_url(principal, application_id))
