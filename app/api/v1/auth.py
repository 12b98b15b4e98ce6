"""Authentication endpoints - current account and email verification."""

from fastapi import APIRouter, Depends

from app.api.deps import get_current_principal, get_workflow
from app.core.security import Principal
from app.schemas.common import APIResponse, ok
from app.schemas.user import UserResponse
from app.services.workflow import MarketplaceWorkflow

router = APIRouter()


@router.get("/me", response_model=APIResponse[UserResponse])
async def get_me(
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """
    Get the signed-in user.

    The first call with a new identity token creates the account.
    """
    return ok(await workflow.get_user(principal))


@router.post("/send-verification", response_model=APIResponse[bool])
async def send_verification(
    principal: Principal = Depends(get_current_principal),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
):
    """Resend the email verification message."""
    sent = await workflow.resend_verification(principal)
    return ok(sent, "Verification email sent" if sent else "Could not send verification email")
