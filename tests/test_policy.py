"""Tests for the access policy."""

import pytest

from app.core.exceptions import (
    AlreadyExists,
    EmailNotVerified,
    NotFound,
    PermissionDenied,
    PreconditionFailed,
    Unauthenticated,
)
from app.core.security import Principal
from app.services.policy import Action, authorize, can_perform
from app.utils.constants import UserRole


def principal(role=UserRole.SEEKER, uid="user-1", verified=True):
    return Principal(uid=uid, email=f"{uid}@example.com", email_verified=verified, role=role)


APPROVED_JOB = {"id": "job-1", "status": "approved", "poster_uid": "employer-1"}
PENDING_JOB = {"id": "job-2", "status": "pending", "poster_uid": "employer-1"}


class TestAnonymous:
    def test_public_actions_allowed(self):
        assert can_perform(None, Action.SEARCH_JOBS)
        assert can_perform(None, Action.VIEW_STATS)
        assert can_perform(None, Action.VIEW_JOB, {"job": APPROVED_JOB})

    def test_unpublished_job_is_hidden(self):
        decision = can_perform(None, Action.VIEW_JOB, {"job": PENDING_JOB})
        assert not decision.allowed
        assert decision.error is NotFound

    @pytest.mark.parametrize(
        "action",
        [Action.CREATE_COMPANY, Action.APPLY_TO_JOB, Action.VIEW_PROFILE, Action.MODERATE_JOB],
    )
    def test_everything_else_requires_authentication(self, action):
        decision = can_perform(None, action)
        assert not decision.allowed
        assert decision.error is Unauthenticated


class TestEmailVerification:
    @pytest.mark.parametrize(
        "action",
        [Action.CREATE_COMPANY, Action.CREATE_JOB, Action.APPLY_TO_JOB, Action.UPDATE_APPLICATION_STATUS],
    )
    def test_unverified_callers_are_refused(self, action):
        decision = can_perform(principal(UserRole.EMPLOYER, verified=False), action)
        assert decision.error is EmailNotVerified

    def test_verification_checked_before_role(self):
        # An unverified admin still cannot apply, and the reason is verification
        decision = can_perform(principal(UserRole.ADMIN, verified=False), Action.APPLY_TO_JOB)
        assert decision.error is EmailNotVerified

    def test_unverified_user_can_view_profile(self):
        assert can_perform(principal(verified=False), Action.VIEW_PROFILE)


class TestRoles:
    def test_moderation_is_admin_only(self):
        assert can_perform(principal(UserRole.ADMIN), Action.MODERATE_COMPANY)
        decision = can_perform(principal(UserRole.EMPLOYER), Action.MODERATE_COMPANY)
        assert decision.error is PermissionDenied

    def test_only_seekers_apply(self):
        assert can_perform(principal(UserRole.SEEKER), Action.APPLY_TO_JOB)
        assert can_perform(principal(UserRole.EMPLOYER), Action.APPLY_TO_JOB).error is PermissionDenied
        assert can_perform(principal(UserRole.ADMIN), Action.APPLY_TO_JOB).error is PermissionDenied

    def test_second_company_is_refused(self):
        decision = can_perform(principal(), Action.CREATE_COMPANY, {"existing_company": {"id": "c-1"}})
        assert decision.error is AlreadyExists

    def test_job_posting_needs_own_approved_company(self):
        employer = principal(UserRole.EMPLOYER, uid="employer-1")
        approved = {"owner_uid": "employer-1", "status": "approved"}
        pending = {"owner_uid": "employer-1", "status": "pending"}
        foreign = {"owner_uid": "someone-else", "status": "approved"}

        assert can_perform(employer, Action.CREATE_JOB, {"company": approved})
        assert not can_perform(employer, Action.CREATE_JOB, {"company": pending})
        assert not can_perform(employer, Action.CREATE_JOB, {"company": foreign})
        assert not can_perform(employer, Action.CREATE_JOB, {"company": None})

    def test_seeker_cannot_post_jobs(self):
        decision = can_perform(principal(), Action.CREATE_JOB, {"company": {"owner_uid": "user-1", "status": "approved"}})
        assert decision.error is PermissionDenied


class TestOwnership:
    def test_approved_company_locks_most_fields(self):
        owner = principal(UserRole.EMPLOYER, uid="owner")
        company = {"owner_uid": "owner", "status": "approved"}

        assert can_perform(owner, Action.UPDATE_COMPANY, {"company": company, "fields": {"phone", "address"}})
        decision = can_perform(owner, Action.UPDATE_COMPANY, {"company": company, "fields": {"name", "phone"}})
        assert decision.error is PreconditionFailed
        assert "name" in decision.reason

    def test_pending_company_is_fully_editable(self):
        owner = principal(uid="owner")
        company = {"owner_uid": "owner", "status": "pending"}
        assert can_perform(owner, Action.UPDATE_COMPANY, {"company": company, "fields": {"name", "website"}})

    def test_non_owner_cannot_edit_company(self):
        company = {"owner_uid": "owner", "status": "pending"}
        assert can_perform(principal(UserRole.ADMIN), Action.UPDATE_COMPANY, {"company": company}).error is PermissionDenied

    def test_only_pending_jobs_are_editable(self):
        poster = principal(UserRole.EMPLOYER, uid="employer-1")
        assert can_perform(poster, Action.UPDATE_JOB, {"job": PENDING_JOB})
        assert can_perform(poster, Action.UPDATE_JOB, {"job": APPROVED_JOB}).error is PreconditionFailed

    def test_job_applications_visible_to_poster_and_admin(self):
        assert can_perform(principal(UserRole.EMPLOYER, uid="employer-1"), Action.LIST_JOB_APPLICATIONS, {"job": APPROVED_JOB})
        assert can_perform(principal(UserRole.ADMIN), Action.LIST_JOB_APPLICATIONS, {"job": APPROVED_JOB})
        other = principal(UserRole.EMPLOYER, uid="employer-2")
        assert can_perform(other, Action.LIST_JOB_APPLICATIONS, {"job": APPROVED_JOB}).error is PermissionDenied

    def test_poster_sees_own_pending_job(self):
        assert can_perform(principal(UserRole.EMPLOYER, uid="employer-1"), Action.VIEW_JOB, {"job": PENDING_JOB})
        assert can_perform(principal(), Action.VIEW_JOB, {"job": PENDING_JOB}).error is NotFound

    def test_users_may_delete_themselves(self):
        assert can_perform(principal(uid="me"), Action.DELETE_USER, {"uid": "me"})
        assert not can_perform(principal(uid="me"), Action.DELETE_USER, {"uid": "you"})


def test_authorize_raises_the_decision_error():
    with pytest.raises(EmailNotVerified):
        authorize(principal(verified=False), Action.APPLY_TO_JOB)
    authorize(principal(UserRole.ADMIN), Action.VIEW_AUDIT_LOG)
