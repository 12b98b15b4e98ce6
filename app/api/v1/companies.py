"""Company (institution) endpoints."""

from fastapi import APIRouter, Depends, File, UploadFile, status

from app.api.deps import get_current_principal, get_workflow
from app.core.security import Principal
from app.schemas.common import APIResponse, ok
from app.schemas.company import CompanyCreate, CompanyResponse, CompanyUpdate
from app.services.workflow import MarketplaceWorkflow

router = APIRouter()


@router.post("", response_model=APIResponse[CompanyResponse], status_code=status.HTTP_201_CREATED)
async def create_company(
    payload: CompanyCreate,
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """
    Register an institution.

    The company starts **pending** and can post jobs once an admin approves it.
    Each user can own one company.
    """
    company = await workflow.create_company(principal, payload)
    return ok(company, "Institution submitted for review")


@router.get("/me", response_model=APIResponse[CompanyResponse])
async def get_my_company(
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Get the institution owned by the caller."""
    return ok(await workflow.get_company_by_owner(principal))


@router.put("/{company_id}", response_model=APIResponse[CompanyResponse])
async def update_company(
    company_id: str,
    payload: CompanyUpdate,
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Update an institution. Once approved only phone and address can change."""
    return ok(await workflow.update_company(principal, company_id, payload), "Institution updated")


@router.post("/{company_id}/proofs", response_model=APIResponse[CompanyResponse])
async def upload_proof(
    company_id: str,
    file: UploadFile = File(...),
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Upload a verification document for a pending institution."""
    content = await file.read()
    company = await workflow.attach_company_proof(principal, company_id, file.filename or "", content)
    return ok(company, "Document uploaded")
