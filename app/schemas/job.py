"""Job schemas."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.schemas.common import HttpUrlStr, reject_explicit_nulls
from app.utils.constants import (
    ApplyMode,
    Department,
    EmploymentType,
    InstituteType,
    JobLevel,
    JobSort,
    JobStatus,
    PostedWithin,
)
from app.utils.helpers import ensure_utc


class JobLocation(BaseModel):
    """Where the position is based."""

    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    country: str = "India"


class JobCreate(BaseModel):
    """Create a job posting (starts pending moderation)."""

    model_config = ConfigDict(use_enum_values=True, str_strip_whitespace=True, validate_default=True)

    title: str = Field(..., min_length=5, max_length=500)
    department: Department
    level: JobLevel
    institute_type: InstituteType
    employment_type: EmploymentType
    location: JobLocation

    min_salary: Optional[float] = Field(None, ge=0)
    max_salary: Optional[float] = Field(None, ge=0)
    currency: str = "INR"

    qualifications: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    responsibilities: List[str] = Field(default_factory=list)
    description: str = Field(..., min_length=50)
    requirements: Optional[str] = None
    last_date: datetime

    apply_mode: ApplyMode = ApplyMode.INTERNAL
    apply_url: Optional[HttpUrlStr] = None

    # Defaults to the caller's own institution
    company_id: Optional[str] = None

    @field_validator("last_date")
    @classmethod
    def last_date_utc(cls, v: datetime) -> datetime:
        """Treat naive deadlines as UTC."""
        return ensure_utc(v)

    @model_validator(mode="after")
    def check_consistency(self):
        if (
            self.min_salary is not None
            and self.max_salary is not None
            and self.min_salary > self.max_salary
        ):
            raise ValueError("min_salary must not exceed max_salary")
        if self.apply_mode == ApplyMode.EXTERNAL.value and not self.apply_url:
            raise ValueError("apply_url is required when apply_mode is external")
        return self


# Optional on the record, so a partial update may send null to clear them
CLEARABLE_JOB_FIELDS = frozenset({"min_salary", "max_salary", "requirements", "apply_url"})


class JobUpdate(BaseModel):
    """Partial update of a pending job."""

    model_config = ConfigDict(use_enum_values=True, str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=5, max_length=500)
    department: Optional[Department] = None
    level: Optional[JobLevel] = None
    institute_type: Optional[InstituteType] = None
    employment_type: Optional[EmploymentType] = None
    location: Optional[JobLocation] = None
    min_salary: Optional[float] = Field(None, ge=0)
    max_salary: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    qualifications: Optional[List[str]] = None
    skills: Optional[List[str]] = None
    responsibilities: Optional[List[str]] = None
    description: Optional[str] = Field(None, min_length=50)
    requirements: Optional[str] = None
    last_date: Optional[datetime] = None
    apply_mode: Optional[ApplyMode] = None
    apply_url: Optional[HttpUrlStr] = None

    @field_validator("last_date")
    @classmethod
    def last_date_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @model_validator(mode="after")
    def required_fields_not_null(self):
        reject_explicit_nulls(self, CLEARABLE_JOB_FIELDS)
        return self


class JobStatusUpdate(BaseModel):
    """Admin moderation decision."""

    status: Literal["approved", "rejected"]
    reason: Optional[str] = Field(None, max_length=1000)


class JobResponse(BaseModel):
    """Job response schema."""

    id: str
    title: str
    department: str
    level: str
    institute_type: str
    employment_type: str
    location: JobLocation
    min_salary: Optional[float] = None
    max_salary: Optional[float] = None
    currency: str = "INR"
    qualifications: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    responsibilities: List[str] = Field(default_factory=list)
    description: str
    requirements: Optional[str] = None
    last_date: datetime
    apply_mode: ApplyMode
    apply_url: Optional[str] = None
    company_id: str
    poster_uid: str
    status: JobStatus
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    view_count: int = 0
    application_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None


class JobSearchFilters(BaseModel):
    """
    Search input.

    ``limit`` above the hard cap is clamped rather than rejected.
    """

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    query: Optional[str] = None
    department: Optional[Department] = None
    institute_type: Optional[InstituteType] = None
    level: Optional[JobLevel] = None
    location: Optional[str] = None
    employment_type: Optional[EmploymentType] = None
    posted_within: PostedWithin = PostedWithin.ALL
    sort_by: JobSort = JobSort.NEWEST
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1)


class JobPage(BaseModel):
    """One page of search results."""

    items: List[JobResponse]
    total: int
    page: int
    limit: int
    has_more: bool
