"""Common constants and enumerations."""

from enum import Enum


class UserRole(str, Enum):
    """User roles."""

    SEEKER = "seeker"
    EMPLOYER = "employer"
    ADMIN = "admin"


class CompanyStatus(str, Enum):
    """Company moderation states."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class JobStatus(str, Enum):
    """Job moderation states."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"


class ApplicationStatus(str, Enum):
    """Application review states."""

    SUBMITTED = "submitted"
    REVIEWED = "reviewed"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"
    OFFERED = "offered"
    WITHDRAWN = "withdrawn"


class ApplyMode(str, Enum):
    """Where candidates apply for a job."""

    INTERNAL = "internal"
    EXTERNAL = "external"


class InstituteType(str, Enum):
    IIT = "IIT"
    NIT = "NIT"
    IIIT = "IIIT"
    IISC = "IISc"
    CENTRAL_UNIVERSITY = "Central University"
    STATE_UNIVERSITY = "State University"
    DEEMED_UNIVERSITY = "Deemed University"
    PRIVATE_UNIVERSITY = "Private University"
    COMMUNITY_COLLEGE = "Community College"
    RESEARCH_INSTITUTE = "Research Institute"
    OTHER = "Other"


class JobLevel(str, Enum):
    ASSISTANT_PROFESSOR = "Assistant Professor"
    ASSOCIATE_PROFESSOR = "Associate Professor"
    PROFESSOR = "Professor"
    LECTURER = "Lecturer"
    SENIOR_LECTURER = "Senior Lecturer"
    PRINCIPAL = "Principal"
    VICE_CHANCELLOR = "Vice-Chancellor"
    DIRECTOR = "Director"
    VISITING_PROFESSOR = "Visiting Professor"
    ADJUNCT_PROFESSOR = "Adjunct Professor"
    POSTDOC = "Postdoc"
    RESEARCH_ASSOCIATE = "Research Associate"
    RESEARCH_SCIENTIST = "Research Scientist"


class EmploymentType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    TEMPORARY = "Temporary"
    VISITING = "Visiting"


class Department(str, Enum):
    MATHEMATICS = "Mathematics"
    STATISTICS = "Statistics"
    CONTROL_THEORY = "Control Theory"
    COMPUTER_SCIENCE = "Computer Science"
    PHYSICS = "Physics"
    CHEMISTRY = "Chemistry"
    BIOLOGY = "Biology"
    ENGINEERING = "Engineering"
    ECONOMICS = "Economics"
    MANAGEMENT = "Management"
    SOCIAL_SCIENCES = "Social Sciences"
    HUMANITIES = "Humanities"
    MEDICINE = "Medicine"
    LAW = "Law"
    EDUCATION = "Education"
    OTHER = "Other"


class AuditAction(str, Enum):
    """Actions recorded in the audit log."""

    USER_CREATED = "user_created"
    USER_ROLE_CHANGED = "user_role_changed"
    USER_DELETED = "user_deleted"
    COMPANY_CREATED = "company_created"
    COMPANY_APPROVED = "company_approved"
    COMPANY_REJECTED = "company_rejected"
    JOB_CREATED = "job_created"
    JOB_APPROVED = "job_approved"
    JOB_REJECTED = "job_rejected"
    JOB_DELETED = "job_deleted"
    APPLICATION_SUBMITTED = "application_submitted"
    APPLICATION_STATUS_CHANGED = "application_status_changed"


class PostedWithin(str, Enum):
    """Recency windows for job search."""

    DAY = "24h"
    WEEK = "7d"
    MONTH = "30d"
    ALL = "all"


class JobSort(str, Enum):
    NEWEST = "newest"
    DEADLINE = "deadline"
    SALARY_HIGH = "salary_high"
    SALARY_LOW = "salary_low"


# Days covered by each recency window
POSTED_WITHIN_DAYS = {
    PostedWithin.DAY: 1,
    PostedWithin.WEEK: 7,
    PostedWithin.MONTH: 30,
}

# Statuses an employer or admin may move an application into
REVIEWABLE_APPLICATION_STATUSES = frozenset(
    {
        ApplicationStatus.REVIEWED,
        ApplicationStatus.SHORTLISTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.OFFERED,
    }
)

# Company fields the owner may still edit after approval
POST_APPROVAL_COMPANY_FIELDS = frozenset({"phone", "address"})

# Audit target types
TARGET_USER = "user"
TARGET_COMPANY = "company"
TARGET_JOB = "job"
TARGET_APPLICATION = "application"

# Blob store prefixes
RESUME_PREFIX = "resumes"
PROOF_PREFIX = "proofs"

# Default number of audit log entries returned
AUDIT_LOG_DEFAULT_LIMIT = 50
