"""
API Dependencies
Common dependencies for API endpoints (authentication, workflow access)
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import Unauthenticated
from app.core.security import Principal
from app.services.blob_storage import LocalBlobStore
from app.services.workflow import MarketplaceWorkflow

# HTTPBearer so Swagger accepts a pasted identity token
bearer_scheme = HTTPBearer(auto_error=False)


def get_workflow(request: Request) -> MarketplaceWorkflow:
    """Workflow engine built in create_app."""
    return request.app.state.workflow


def get_blob_store(request: Request) -> LocalBlobStore:
    return request.app.state.blob_store


async def get_optional_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    workflow: MarketplaceWorkflow = Depends(get_workflow),
) -> Optional[Principal]:
    """
    Resolve the caller from the bearer token, or None when no token is sent.

    An invalid token is an error even on public endpoints.
    """
    if credentials is None:
        return None
    identity = request.app.state.identity_provider.verify(credentials.credentials)
    return await workflow.sign_in(identity)


async def get_current_principal(
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> Principal:
    """Require an authenticated caller."""
    if principal is None:
        raise Unauthenticated()
    return principal
