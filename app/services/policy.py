"""
Access policy.

``can_perform`` is a pure function of the caller, the action and the
resource the action touches. It performs no I/O; workflow methods load the
resource first, ask the policy, and raise the decision's error on denial.

Rules are evaluated in order and the first match wins:

1. Anonymous callers may only use public read actions.
2. Actions that require a verified email are refused for unverified callers.
3. Role and ownership rules for the specific action.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Type

from app.core.exceptions import (
    AlreadyExists,
    EmailNotVerified,
    MarketplaceError,
    NotFound,
    PermissionDenied,
    PreconditionFailed,
    Unauthenticated,
)
from app.core.security import Principal
from app.utils.constants import (
    POST_APPROVAL_COMPANY_FIELDS,
    CompanyStatus,
    JobStatus,
)


class Action(str, Enum):
    """Operations subject to access control."""

    # Public reads
    SEARCH_JOBS = "jobs:search"
    VIEW_JOB = "jobs:view"
    VIEW_STATS = "stats:view"

    # Account
    VIEW_PROFILE = "profile:view"
    RESEND_VERIFICATION = "profile:resend_verification"
    DELETE_USER = "users:delete"

    # Companies
    CREATE_COMPANY = "companies:create"
    UPDATE_COMPANY = "companies:update"
    VIEW_OWN_COMPANY = "companies:view_own"

    # Jobs
    CREATE_JOB = "jobs:create"
    UPDATE_JOB = "jobs:update"
    DELETE_JOB = "jobs:delete"
    LIST_OWN_JOBS = "jobs:list_own"

    # Applications
    APPLY_TO_JOB = "applications:create"
    LIST_OWN_APPLICATIONS = "applications:list_own"
    UPDATE_APPLICATION_STATUS = "applications:update_status"
    LIST_JOB_APPLICATIONS = "applications:list_for_job"
    VIEW_RESUME = "applications:view_resume"

    # Moderation
    MODERATE_COMPANY = "admin:moderate_company"
    MODERATE_JOB = "admin:moderate_job"
    VIEW_PENDING = "admin:view_pending"
    VIEW_AUDIT_LOG = "admin:view_audit_log"


PUBLIC_ACTIONS = frozenset({Action.SEARCH_JOBS, Action.VIEW_JOB, Action.VIEW_STATS})

VERIFIED_ACTIONS = frozenset(
    {
        Action.CREATE_COMPANY,
        Action.CREATE_JOB,
        Action.APPLY_TO_JOB,
        Action.UPDATE_APPLICATION_STATUS,
        Action.RESEND_VERIFICATION,
    }
)

ADMIN_ACTIONS = frozenset(
    {
        Action.MODERATE_COMPANY,
        Action.MODERATE_JOB,
        Action.VIEW_PENDING,
        Action.VIEW_AUDIT_LOG,
    }
)

# Actions open to any signed-in user
AUTHENTICATED_ACTIONS = frozenset({Action.VIEW_PROFILE, Action.VIEW_OWN_COMPANY})


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""
    error: Optional[Type[MarketplaceError]] = field(default=None, compare=False)

    @classmethod
    def allow(cls) -> "Decision":
        return cls(True)

    @classmethod
    def deny(cls, error: Type[MarketplaceError], reason: str) -> "Decision":
        return cls(False, reason, error)

    def raise_if_denied(self) -> None:
        if not self.allowed:
            raise (self.error or PermissionDenied)(self.reason)

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision.allow()


def _is_job_manager(principal: Principal, job: Mapping[str, Any]) -> bool:
    """Admins, and the employer who posted the job."""
    if principal.is_admin:
        return True
    return principal.is_employer and job.get("poster_uid") == principal.uid


def can_perform(
    principal: Optional[Principal],
    action: Action,
    resource: Optional[Mapping[str, Any]] = None,
) -> Decision:
    """
    Decide whether ``principal`` may perform ``action``.

    Args:
        principal: Caller, or None for anonymous requests
        action: Action being attempted
        resource: Context for the decision, e.g. ``{"job": {...}}``,
            ``{"company": {...}, "fields": {...}}``, ``{"existing_company": None}``

    Returns:
        Decision carrying the error class to raise on denial
    """
    resource = resource or {}

    # 1. Anonymous callers
    if principal is None:
        if action not in PUBLIC_ACTIONS:
            return Decision.deny(Unauthenticated, "Authentication required")
        if action == Action.VIEW_JOB:
            job = resource.get("job") or {}
            if job.get("status") != JobStatus.APPROVED.value:
                return Decision.deny(NotFound, "Job not found")
        return ALLOW

    # 2. Verified email
    if action in VERIFIED_ACTIONS and not principal.email_verified:
        return Decision.deny(EmailNotVerified, "Please verify your email address first")

    # 3. Role and ownership
    if action in PUBLIC_ACTIONS - {Action.VIEW_JOB} or action in AUTHENTICATED_ACTIONS:
        return ALLOW

    if action in ADMIN_ACTIONS:
        if not principal.is_admin:
            return Decision.deny(PermissionDenied, "Admin access required")
        return ALLOW

    if action == Action.RESEND_VERIFICATION:
        return ALLOW

    if action == Action.DELETE_USER:
        if principal.is_admin or resource.get("uid") == principal.uid:
            return ALLOW
        return Decision.deny(PermissionDenied, "Only admins can delete other users")

    if action == Action.CREATE_COMPANY:
        if resource.get("existing_company") is not None:
            return Decision.deny(AlreadyExists, "You already have a registered institution")
        return ALLOW

    if action == Action.UPDATE_COMPANY:
        company = resource.get("company") or {}
        if company.get("owner_uid") != principal.uid:
            return Decision.deny(PermissionDenied, "Only the owner can edit this institution")
        if company.get("status") == CompanyStatus.APPROVED.value:
            locked = set(resource.get("fields") or ()) - POST_APPROVAL_COMPANY_FIELDS
            if locked:
                return Decision.deny(
                    PreconditionFailed,
                    "Approved institutions can only update phone and address "
                    f"(got: {', '.join(sorted(locked))})",
                )
        return ALLOW

    if action == Action.CREATE_JOB:
        company = resource.get("company")
        if not principal.is_employer:
            return Decision.deny(PermissionDenied, "Only employers can post jobs")
        if company is None or company.get("owner_uid") != principal.uid:
            return Decision.deny(PermissionDenied, "You can only post jobs for your own institution")
        if company.get("status") != CompanyStatus.APPROVED.value:
            return Decision.deny(PermissionDenied, "Your institution has not been approved yet")
        return ALLOW

    if action == Action.LIST_OWN_JOBS:
        if principal.is_employer or principal.is_admin:
            return ALLOW
        return Decision.deny(PermissionDenied, "Only employers have posted jobs")

    if action == Action.UPDATE_JOB:
        job = resource.get("job") or {}
        if job.get("poster_uid") != principal.uid:
            return Decision.deny(PermissionDenied, "Only the poster can edit this job")
        if job.get("status") != JobStatus.PENDING.value:
            return Decision.deny(PreconditionFailed, "Only pending jobs can be edited")
        return ALLOW

    if action == Action.DELETE_JOB:
        job = resource.get("job") or {}
        if principal.is_admin or job.get("poster_uid") == principal.uid:
            return ALLOW
        return Decision.deny(PermissionDenied, "Only the poster or an admin can delete this job")

    if action == Action.VIEW_JOB:
        job = resource.get("job") or {}
        if job.get("status") == JobStatus.APPROVED.value:
            return ALLOW
        if principal.is_admin or job.get("poster_uid") == principal.uid:
            return ALLOW
        return Decision.deny(NotFound, "Job not found")

    if action == Action.APPLY_TO_JOB:
        if not principal.is_seeker:
            return Decision.deny(PermissionDenied, "Only job seekers can apply to jobs")
        return ALLOW

    if action == Action.LIST_OWN_APPLICATIONS:
        if not principal.is_seeker:
            return Decision.deny(PermissionDenied, "Only job seekers have applications")
        return ALLOW

    if action in (
        Action.UPDATE_APPLICATION_STATUS,
        Action.LIST_JOB_APPLICATIONS,
        Action.VIEW_RESUME,
    ):
        job = resource.get("job") or {}
        if _is_job_manager(principal, job):
            return ALLOW
        return Decision.deny(
            PermissionDenied, "Only the job poster or an admin can manage its applications"
        )

    return Decision.deny(PermissionDenied, f"Action not permitted: {action.value}")


def authorize(
    principal: Optional[Principal],
    action: Action,
    resource: Optional[Mapping[str, Any]] = None,
) -> None:
    """Raise the denial's error unless ``principal`` may perform ``action``."""
    can_perform(principal, action, resource).raise_if_denied()
