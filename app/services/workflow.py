"""
Marketplace workflow engine.

Owns the moderation and application lifecycles:

    Company:      pending -> approved | rejected
    Job:          pending -> approved | rejected, approved -> expired (sweep only)
    Application:  submitted -> reviewed | shortlisted | rejected | offered

Each mutating operation validates its preconditions, then writes the entity
change and its audit entry in a single store transaction. Notifications are
sent after commit, bounded by a timeout, and never undo a committed change.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog

from app.config import Settings, settings as default_settings
from app.core.exceptions import (
    AlreadyExists,
    DuplicateApplication,
    Internal,
    InvalidArgument,
    NotFound,
    PreconditionFailed,
)
from app.core.security import Principal, VerifiedIdentity
from app.repositories.base import Collection, EntityStore, Filter, Sort, eq
from app.schemas.application import ApplicationCreate
from app.schemas.company import CompanyCreate, CompanyUpdate
from app.schemas.job import JobCreate, JobSearchFilters, JobUpdate
from app.services.blob_storage import LocalBlobStore
from app.services.notifier import NotificationKind, Notifier, notify_safely
from app.services.policy import Action, authorize
from app.services.search import JobSearchEngine
from app.utils.constants import (
    AUDIT_LOG_DEFAULT_LIMIT,
    PROOF_PREFIX,
    RESUME_PREFIX,
    REVIEWABLE_APPLICATION_STATUSES,
    TARGET_APPLICATION,
    TARGET_COMPANY,
    TARGET_JOB,
    TARGET_USER,
    ApplicationStatus,
    ApplyMode,
    AuditAction,
    CompanyStatus,
    JobStatus,
    UserRole,
)
from app.utils.helpers import application_dedupe_key, utcnow
from app.utils.validators import validate_salary_range, validate_upload

logger = structlog.get_logger(__name__)

Record = Dict[str, Any]


def principal_from_user(user: Record) -> Principal:
    """Snapshot a stored user as the caller of an operation."""
    return Principal(
        uid=user["id"],
        email=user["email"],
        email_verified=bool(user.get("email_verified")),
        role=UserRole(user["role"]),
    )


class MarketplaceWorkflow:
    """State machines and side effects of the marketplace."""

    def __init__(
        self,
        store: EntityStore,
        notifier: Notifier,
        blob_store: Optional[LocalBlobStore] = None,
        config: Optional[Settings] = None,
    ):
        self.store = store
        self.notifier = notifier
        self.blob_store = blob_store
        self.settings = config or default_settings
        self.search_engine = JobSearchEngine(store)

    # ==================== Internals ==================== #

    async def _audit(
        self,
        actor_uid: str,
        action: AuditAction,
        target_type: str,
        target_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> Record:
        return await self.store.create(
            Collection.AUDIT_LOGS,
            {
                "actor_uid": actor_uid,
                "action": action.value,
                "target_type": target_type,
                "target_id": target_id,
                "details": details or {},
            },
        )

    async def _notify(self, to_address: Optional[str], kind: NotificationKind, data: Dict[str, Any]) -> bool:
        return await notify_safely(
            self.notifier, to_address, kind, data, timeout=self.settings.NOTIFY_TIMEOUT_SECONDS
        )

    async def _user_email(self, uid: str) -> Optional[str]:
        user = await self.store.find_one(Collection.USERS, id=uid)
        return user["email"] if user else None

    def _require_blob_store(self) -> LocalBlobStore:
        if self.blob_store is None:
            raise Internal("File storage is not configured")
        return self.blob_store

    # ==================== Users ==================== #

    async def sign_in(self, identity: VerifiedIdentity) -> Principal:
        """
        Resolve a verified identity to a Principal, creating the user on
        first sign-in.

        New users are seekers unless their email is listed in ADMIN_EMAILS.
        The stored email_verified flag follows the identity provider.
        """
        user = await self.store.find_one(Collection.USERS, id=identity.uid)

        if user is None:
            role = (
                UserRole.ADMIN
                if identity.email.lower() in self.settings.admin_emails
                else UserRole.SEEKER
            )
            try:
                async with self.store.transaction():
                    user = await self.store.create(
                        Collection.USERS,
                        {
                            "id": identity.uid,
                            "display_name": identity.display_name or identity.email.split("@")[0],
                            "email": identity.email.lower(),
                            "role": role.value,
                            "email_verified": identity.email_verified,
                        },
                    )
                    await self._audit(
                        identity.uid,
                        AuditAction.USER_CREATED,
                        TARGET_USER,
                        identity.uid,
                        {"email": user["email"], "role": role.value},
                    )
            except AlreadyExists:
                # A concurrent sign-in created the user first
                user = await self.store.find_one(Collection.USERS, id=identity.uid)
                if user is None:
                    raise AlreadyExists("An account with this email already exists")
            else:
                logger.info("user_created", uid=identity.uid, role=role.value)
                await self._notify(
                    user["email"], NotificationKind.WELCOME, {"name": user["display_name"]}
                )

        if bool(user.get("email_verified")) != identity.email_verified:
            user = await self.store.update(
                Collection.USERS, identity.uid, {"email_verified": identity.email_verified}
            )

        return principal_from_user(user)

    async def get_user(self, principal: Principal) -> Record:
        authorize(principal, Action.VIEW_PROFILE)
        return await self.store.get(Collection.USERS, principal.uid)

    async def resend_verification(self, principal: Principal) -> bool:
        authorize(principal, Action.RESEND_VERIFICATION)
        user = await self.store.get(Collection.USERS, principal.uid)
        return await self._notify(
            user["email"], NotificationKind.VERIFY_EMAIL, {"name": user["display_name"]}
        )

    async def delete_user(self, principal: Principal, uid: str) -> Dict[str, Any]:
        """
        Delete a user and everything they own.

        Cascades to jobs they posted (with those jobs' applications), the
        company they own and applications they submitted. Jobs that lose an
        application get their application_count decremented so the counter
        keeps matching live applications.
        """
        authorize(principal, Action.DELETE_USER, {"uid": uid})

        removed_blobs: List[str] = []
        async with self.store.transaction():
            await self.store.get(Collection.USERS, uid)

            deleted_jobs = set()
            applications_removed = 0
            for job in await self.store.query(Collection.JOBS, [eq("poster_uid", uid)]):
                for application in await self.store.query(
                    Collection.APPLICATIONS, [eq("job_id", job["id"])]
                ):
                    await self.store.delete(Collection.APPLICATIONS, application["id"])
                    applications_removed += 1
                await self.store.delete(Collection.JOBS, job["id"])
                deleted_jobs.add(job["id"])

            for application in await self.store.query(
                Collection.APPLICATIONS, [eq("applicant_uid", uid)]
            ):
                await self.store.delete(Collection.APPLICATIONS, application["id"])
                removed_blobs.append(application["resume_path"])
                applications_removed += 1
                if application["job_id"] not in deleted_jobs:
                    await self.store.increment(
                        Collection.JOBS, application["job_id"], "application_count", -1
                    )

            companies = await self.store.query(Collection.COMPANIES, [eq("owner_uid", uid)])
            for company in companies:
                await self.store.delete(Collection.COMPANIES, company["id"])
                removed_blobs.extend(company.get("proof_docs") or [])

            await self.store.delete(Collection.USERS, uid)

            summary = {
                "uid": uid,
                "applications_removed": applications_removed,
                "jobs_removed": len(deleted_jobs),
                "companies_removed": len(companies),
            }
            await self._audit(principal.uid, AuditAction.USER_DELETED, TARGET_USER, uid, summary)

        if self.blob_store is not None:
            for path in removed_blobs:
                await self.blob_store.delete(path)

        logger.info("user_deleted", **summary)
        return summary

    # ==================== Companies ==================== #

    async def create_company(self, principal: Principal, payload: CompanyCreate) -> Record:
        existing = await self.store.find_one(Collection.COMPANIES, owner_uid=principal.uid)
        authorize(principal, Action.CREATE_COMPANY, {"existing_company": existing})

        data = payload.model_dump()
        data.update(
            owner_uid=principal.uid,
            status=CompanyStatus.PENDING.value,
            proof_docs=[],
        )

        async with self.store.transaction():
            company = await self.store.create(Collection.COMPANIES, data)
            await self._audit(
                principal.uid,
                AuditAction.COMPANY_CREATED,
                TARGET_COMPANY,
                company["id"],
                {"name": company["name"]},
            )

        logger.info("company_created", company_id=company["id"], owner_uid=principal.uid)
        return company

    async def update_company(self, principal: Principal, company_id: str, payload: CompanyUpdate) -> Record:
        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            raise InvalidArgument("No fields to update")

        company = await self.store.get(Collection.COMPANIES, company_id)
        authorize(principal, Action.UPDATE_COMPANY, {"company": company, "fields": set(changes)})
        return await self.store.update(Collection.COMPANIES, company_id, changes)

    async def attach_company_proof(
        self, principal: Principal, company_id: str, filename: str, content: bytes
    ) -> Record:
        """Upload a verification document and append it to ``proof_docs``."""
        company = await self.store.get(Collection.COMPANIES, company_id)
        authorize(principal, Action.UPDATE_COMPANY, {"company": company, "fields": {"proof_docs"}})
        validate_upload(
            filename,
            len(content),
            self.settings.ALLOWED_PROOF_EXTENSIONS,
            self.settings.MAX_UPLOAD_SIZE,
        )

        blob = await self._require_blob_store().put(f"{PROOF_PREFIX}/{company_id}", filename, content)
        proof_docs = list(company.get("proof_docs") or []) + [blob.path]
        return await self.store.update(Collection.COMPANIES, company_id, {"proof_docs": proof_docs})

    async def get_company_by_owner(self, principal: Principal) -> Record:
        authorize(principal, Action.VIEW_OWN_COMPANY)
        company = await self.store.find_one(Collection.COMPANIES, owner_uid=principal.uid)
        if company is None:
            raise NotFound("You have not registered an institution yet")
        return company

    async def list_pending_companies(self, principal: Principal) -> List[Record]:
        authorize(principal, Action.VIEW_PENDING)
        return await self.store.query(
            Collection.COMPANIES, [eq("status", CompanyStatus.PENDING.value)]
        )

    async def approve_company(self, principal: Principal, company_id: str) -> Record:
        """Approve a pending company and promote its owner to employer."""
        authorize(principal, Action.MODERATE_COMPANY)

        async with self.store.transaction():
            company = await self.store.get(Collection.COMPANIES, company_id)
            if company["status"] != CompanyStatus.PENDING.value:
                raise PreconditionFailed(f"Company is already {company['status']}")

            company = await self.store.update(
                Collection.COMPANIES, company_id, {"status": CompanyStatus.APPROVED.value}
            )

            owner = await self.store.find_one(Collection.USERS, id=company["owner_uid"])
            if owner is not None and owner["role"] == UserRole.SEEKER.value:
                await self.store.update(
                    Collection.USERS, owner["id"], {"role": UserRole.EMPLOYER.value}
                )
                await self._audit(
                    principal.uid,
                    AuditAction.USER_ROLE_CHANGED,
                    TARGET_USER,
                    owner["id"],
                    {
                        "from": UserRole.SEEKER.value,
                        "to": UserRole.EMPLOYER.value,
                        "company_id": company_id,
                    },
                )

            await self._audit(
                principal.uid,
                AuditAction.COMPANY_APPROVED,
                TARGET_COMPANY,
                company_id,
                {"name": company["name"]},
            )

        logger.info("company_approved", company_id=company_id, admin_uid=principal.uid)
        await self._notify(
            owner["email"] if owner else company["hr_email"],
            NotificationKind.EMPLOYER_APPROVED,
            {"company_name": company["name"]},
        )
        return company

    async def reject_company(self, principal: Principal, company_id: str, reason: Optional[str] = None) -> Record:
        authorize(principal, Action.MODERATE_COMPANY)

        async with self.store.transaction():
            company = await self.store.get(Collection.COMPANIES, company_id)
            if company["status"] != CompanyStatus.PENDING.value:
                raise PreconditionFailed(f"Company is already {company['status']}")

            company = await self.store.update(
                Collection.COMPANIES, company_id, {"status": CompanyStatus.REJECTED.value}
            )
            await self._audit(
                principal.uid,
                AuditAction.COMPANY_REJECTED,
                TARGET_COMPANY,
                company_id,
                {"name": company["name"], "reason": reason},
            )

        logger.info("company_rejected", company_id=company_id, admin_uid=principal.uid)
        owner_email = await self._user_email(company["owner_uid"])
        await self._notify(
            owner_email or company["hr_email"],
            NotificationKind.EMPLOYER_REJECTED,
            {"company_name": company["name"], "reason": reason},
        )
        return company

    # ==================== Jobs ==================== #

    async def create_job(self, principal: Principal, payload: JobCreate) -> Record:
        if payload.company_id:
            company = await self.store.find_one(Collection.COMPANIES, id=payload.company_id)
        else:
            company = await self.store.find_one(Collection.COMPANIES, owner_uid=principal.uid)
        authorize(principal, Action.CREATE_JOB, {"company": company})

        data = payload.model_dump(exclude={"company_id"})
        data.update(
            company_id=company["id"],
            poster_uid=principal.uid,
            status=JobStatus.PENDING.value,
            approved_by=None,
            approved_at=None,
            view_count=0,
            application_count=0,
        )

        async with self.store.transaction():
            job = await self.store.create(Collection.JOBS, data)
            await self._audit(
                principal.uid,
                AuditAction.JOB_CREATED,
                TARGET_JOB,
                job["id"],
                {"title": job["title"], "company_id": company["id"]},
            )

        logger.info("job_created", job_id=job["id"], company_id=company["id"])
        return job

    async def update_job(self, principal: Principal, job_id: str, payload: JobUpdate) -> Record:
        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            raise InvalidArgument("No fields to update")

        job = await self.store.get(Collection.JOBS, job_id)
        authorize(principal, Action.UPDATE_JOB, {"job": job})

        merged = {**job, **changes}
        validate_salary_range(merged.get("min_salary"), merged.get("max_salary"))
        if merged.get("apply_mode") == ApplyMode.EXTERNAL.value and not merged.get("apply_url"):
            raise InvalidArgument(
                "apply_url is required when apply_mode is external", field="apply_url"
            )

        return await self.store.update(Collection.JOBS, job_id, changes)

    async def delete_job(self, principal: Principal, job_id: str) -> int:
        """Delete a job and its applications. Returns the number of applications removed."""
        job = await self.store.get(Collection.JOBS, job_id)
        authorize(principal, Action.DELETE_JOB, {"job": job})

        async with self.store.transaction():
            applications = await self.store.query(Collection.APPLICATIONS, [eq("job_id", job_id)])
            for application in applications:
                await self.store.delete(Collection.APPLICATIONS, application["id"])
            await self.store.delete(Collection.JOBS, job_id)
            await self._audit(
                principal.uid,
                AuditAction.JOB_DELETED,
                TARGET_JOB,
                job_id,
                {"title": job["title"], "applications_removed": len(applications)},
            )

        logger.info("job_deleted", job_id=job_id, applications_removed=len(applications))
        return len(applications)

    async def get_job(self, principal: Optional[Principal], job_id: str) -> Record:
        """Fetch a job and count the view. Returns the job as it was read."""
        job = await self.store.get(Collection.JOBS, job_id)
        authorize(principal, Action.VIEW_JOB, {"job": job})
        await self.store.increment(Collection.JOBS, job_id, "view_count")
        return job

    async def search_jobs(
        self,
        principal: Optional[Principal],
        filters: JobSearchFilters,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        authorize(principal, Action.SEARCH_JOBS)
        return await self.search_engine.search(filters, now=now)

    async def list_featured_jobs(self, principal: Optional[Principal], limit: Optional[int] = None) -> List[Record]:
        authorize(principal, Action.SEARCH_JOBS)
        return await self.search_engine.featured(limit)

    async def list_jobs_by_poster(self, principal: Principal) -> List[Record]:
        authorize(principal, Action.LIST_OWN_JOBS)
        return await self.store.query(
            Collection.JOBS, [eq("poster_uid", principal.uid)], sort=[Sort("created_at", descending=True)]
        )

    async def list_pending_jobs(self, principal: Principal) -> List[Record]:
        authorize(principal, Action.VIEW_PENDING)
        return await self.store.query(Collection.JOBS, [eq("status", JobStatus.PENDING.value)])

    async def approve_job(self, principal: Principal, job_id: str) -> Record:
        """Publish a pending job. Its company must be approved at this moment."""
        authorize(principal, Action.MODERATE_JOB)

        async with self.store.transaction():
            job = await self.store.get(Collection.JOBS, job_id)
            if job["status"] != JobStatus.PENDING.value:
                raise PreconditionFailed(f"Job is already {job['status']}")

            company = await self.store.find_one(Collection.COMPANIES, id=job["company_id"])
            if company is None or company["status"] != CompanyStatus.APPROVED.value:
                raise PreconditionFailed("The job's institution is not approved")

            job = await self.store.update(
                Collection.JOBS,
                job_id,
                {
                    "status": JobStatus.APPROVED.value,
                    "approved_by": principal.uid,
                    "approved_at": utcnow(),
                },
            )
            await self._audit(
                principal.uid, AuditAction.JOB_APPROVED, TARGET_JOB, job_id, {"title": job["title"]}
            )

        logger.info("job_approved", job_id=job_id, admin_uid=principal.uid)
        await self._notify(
            await self._user_email(job["poster_uid"]),
            NotificationKind.JOB_APPROVED,
            {"job_title": job["title"]},
        )
        return job

    async def reject_job(self, principal: Principal, job_id: str, reason: Optional[str] = None) -> Record:
        authorize(principal, Action.MODERATE_JOB)

        async with self.store.transaction():
            job = await self.store.get(Collection.JOBS, job_id)
            if job["status"] != JobStatus.PENDING.value:
                raise PreconditionFailed(f"Job is already {job['status']}")

            job = await self.store.update(Collection.JOBS, job_id, {"status": JobStatus.REJECTED.value})
            await self._audit(
                principal.uid,
                AuditAction.JOB_REJECTED,
                TARGET_JOB,
                job_id,
                {"title": job["title"], "reason": reason},
            )

        logger.info("job_rejected", job_id=job_id, admin_uid=principal.uid)
        return job

    async def expire_jobs(self, now: Optional[datetime] = None) -> int:
        """
        Move approved jobs whose deadline has passed to expired.

        Runs from the scheduler. Idempotent: already-expired jobs are not
        matched, and each candidate's status is re-checked before the write.
        """
        now = now or utcnow()
        expired = 0

        async with self.store.transaction():
            candidates = await self.store.query(
                Collection.JOBS,
                [eq("status", JobStatus.APPROVED.value), Filter("last_date", "lt", now)],
            )
            for job in candidates:
                current = await self.store.get(Collection.JOBS, job["id"])
                if current["status"] != JobStatus.APPROVED.value:
                    continue
                await self.store.update(Collection.JOBS, job["id"], {"status": JobStatus.EXPIRED.value})
                expired += 1

        logger.info("jobs_expired", count=expired, run_at=now.isoformat())
        return expired

    # ==================== Applications ==================== #

    async def upload_resume(self, principal: Principal, filename: str, content: bytes) -> Dict[str, Any]:
        """Store a resume under the caller's folder; the path is then used to apply."""
        authorize(principal, Action.APPLY_TO_JOB)
        validate_upload(
            filename,
            len(content),
            self.settings.ALLOWED_RESUME_EXTENSIONS,
            self.settings.MAX_UPLOAD_SIZE,
        )
        blob = await self._require_blob_store().put(f"{RESUME_PREFIX}/{principal.uid}", filename, content)
        return {"path": blob.path, "size": blob.size}

    async def create_application(
        self,
        principal: Principal,
        payload: ApplicationCreate,
        now: Optional[datetime] = None,
    ) -> Record:
        """
        Apply to an approved, open, internally-handled job.

        The unique dedupe key makes the second of two concurrent submissions
        for the same job fail with DuplicateApplication.
        """
        authorize(principal, Action.APPLY_TO_JOB)

        if not payload.resume_path.startswith(f"{RESUME_PREFIX}/{principal.uid}/"):
            raise InvalidArgument("Resume must be one of your uploaded files", field="resume_path")

        now = now or utcnow()
        dedupe_key = application_dedupe_key(payload.job_id, principal.uid)

        async with self.store.transaction():
            job = await self.store.get(Collection.JOBS, payload.job_id)
            if job["last_date"] < now:
                raise PreconditionFailed("The application deadline has passed")
            if job["status"] != JobStatus.APPROVED.value:
                raise PreconditionFailed("This job is not accepting applications")
            if job.get("apply_mode") == ApplyMode.EXTERNAL.value:
                raise PreconditionFailed("This job accepts applications on the institution's website")

            try:
                application = await self.store.create(
                    Collection.APPLICATIONS,
                    {
                        "job_id": payload.job_id,
                        "applicant_uid": principal.uid,
                        "resume_path": payload.resume_path,
                        "cover_letter": payload.cover_letter,
                        "status": ApplicationStatus.SUBMITTED.value,
                        "notes": None,
                        "dedupe_key": dedupe_key,
                    },
                )
            except AlreadyExists as exc:
                raise DuplicateApplication() from exc

            await self.store.increment(Collection.JOBS, payload.job_id, "application_count")
            await self._audit(
                principal.uid,
                AuditAction.APPLICATION_SUBMITTED,
                TARGET_APPLICATION,
                application["id"],
                {"job_id": payload.job_id},
            )

        logger.info("application_submitted", application_id=application["id"], job_id=payload.job_id)

        company = await self.store.find_one(Collection.COMPANIES, id=job["company_id"])
        applicant = await self.store.find_one(Collection.USERS, id=principal.uid)
        await self._notify(
            company["hr_email"] if company else None,
            NotificationKind.APPLICATION_RECEIVED,
            {
                "job_title": job["title"],
                "applicant_name": (applicant or {}).get("display_name") or principal.email,
            },
        )
        return application

    async def update_application_status(
        self,
        principal: Principal,
        application_id: str,
        status: str,
        notes: Optional[str] = None,
    ) -> Record:
        """Move an application to a review status and tell the applicant."""
        try:
            target = ApplicationStatus(status)
        except ValueError:
            raise InvalidArgument(f"Unknown application status: {status}", field="status") from None

        async with self.store.transaction():
            application = await self.store.get(Collection.APPLICATIONS, application_id)
            job = await self.store.find_one(Collection.JOBS, id=application["job_id"]) or {}
            authorize(principal, Action.UPDATE_APPLICATION_STATUS, {"job": job})

            if target == ApplicationStatus.WITHDRAWN:
                raise PreconditionFailed("Withdrawing an application is not supported")
            if target not in REVIEWABLE_APPLICATION_STATUSES:
                raise PreconditionFailed(f"Cannot move an application to {target.value}")
            if application["status"] == ApplicationStatus.WITHDRAWN.value:
                raise PreconditionFailed("This application has been withdrawn")

            previous_status = application["status"]
            changes = {"status": target.value}
            if notes is not None:
                changes["notes"] = notes
            application = await self.store.update(Collection.APPLICATIONS, application_id, changes)

            await self._audit(
                principal.uid,
                AuditAction.APPLICATION_STATUS_CHANGED,
                TARGET_APPLICATION,
                application_id,
                {"status": target.value, "previous_status": previous_status, "job_id": job.get("id")},
            )

        logger.info(
            "application_status_changed",
            application_id=application_id,
            status=target.value,
            previous_status=previous_status,
        )
        await self._notify(
            await self._user_email(application["applicant_uid"]),
            NotificationKind.APPLICATION_STATUS_CHANGED,
            {"job_title": job.get("title", ""), "status": target.value, "notes": notes},
        )
        return application

    async def list_my_applications(self, principal: Principal) -> List[Record]:
        authorize(principal, Action.LIST_OWN_APPLICATIONS)
        return await self.store.query(
            Collection.APPLICATIONS,
            [eq("applicant_uid", principal.uid)],
            sort=[Sort("created_at", descending=True)],
        )

    async def list_job_applications(self, principal: Principal, job_id: str) -> List[Record]:
        job = await self.store.get(Collection.JOBS, job_id)
        authorize(principal, Action.LIST_JOB_APPLICATIONS, {"job": job})
        return await self.store.query(Collection.APPLICATIONS, [eq("job_id", job_id)])

    async def get_resume_url(self, principal: Principal, application_id: str) -> Dict[str, Any]:
        """Short-lived download link for an applicant's resume."""
        application = await self.store.get(Collection.APPLICATIONS, application_id)
        job = await self.store.find_one(Collection.JOBS, id=application["job_id"]) or {}
        authorize(principal, Action.VIEW_RESUME, {"job": job})

        expires_in = self.settings.SIGNED_URL_EXPIRE_SECONDS
        url = self._require_blob_store().signed_url(application["resume_path"], expires_in)
        return {"url": url, "expires_in": expires_in}

    # ==================== Admin ==================== #

    async def list_audit_logs(
        self,
        principal: Principal,
        limit: int = AUDIT_LOG_DEFAULT_LIMIT,
        action: Optional[str] = None,
        target_id: Optional[str] = None,
    ) -> List[Record]:
        """Newest audit entries first."""
        authorize(principal, Action.VIEW_AUDIT_LOG)

        filters = []
        if action:
            filters.append(eq("action", action))
        if target_id:
            filters.append(eq("target_id", target_id))

        return await self.store.query(
            Collection.AUDIT_LOGS,
            filters,
            sort=[Sort("created_at", descending=True)],
            limit=max(1, min(limit, self.settings.MAX_PAGE_SIZE)),
        )

    async def get_stats(self, principal: Optional[Principal] = None) -> Dict[str, int]:
        authorize(principal, Action.VIEW_STATS)
        count = self.store.count
        return {
            "total_jobs": await count(Collection.JOBS),
            "total_applications": await count(Collection.APPLICATIONS),
            "total_employers": await count(Collection.USERS, [eq("role", UserRole.EMPLOYER.value)]),
            "total_seekers": await count(Collection.USERS, [eq("role", UserRole.SEEKER.value)]),
            "pending_jobs": await count(Collection.JOBS, [eq("status", JobStatus.PENDING.value)]),
            "pending_employers": await count(
                Collection.COMPANIES, [eq("status", CompanyStatus.PENDING.value)]
            ),
            "active_jobs": await count(Collection.JOBS, [eq("status", JobStatus.APPROVED.value)]),
        }
