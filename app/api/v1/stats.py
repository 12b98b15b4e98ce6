"""Public platform statistics."""

from typing import Optional

from fastapi import APIRouter, Depends

from app.api.deps import get_optional_principal, get_workflow
from app.core.security import Principal
from app.schemas.admin import StatsResponse
from app.schemas.common import APIResponse, ok
from app.services.workflow import MarketplaceWorkflow

router = APIRouter()


@router.get("", response_model=APIResponse[StatsResponse])
async def get_stats(
    principal: Optional[Principal] = Depends(get_optional_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Counts of jobs, applications, employers and seekers."""
    return ok(await workflow.get_stats(principal))
