"""Application schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.utils.constants import ApplicationStatus


class ApplicationCreate(BaseModel):
    """Apply to a job with a previously uploaded resume."""

    job_id: str = Field(..., min_length=1)
    resume_path: str = Field(..., min_length=1)
    cover_letter: Optional[str] = Field(None, max_length=5000)


class ApplicationStatusUpdate(BaseModel):
    """Employer or admin review decision."""

    model_config = ConfigDict(use_enum_values=True)

    status: ApplicationStatus
    notes: Optional[str] = Field(None, max_length=2000)


class ApplicationResponse(BaseModel):
    """Application response schema."""

    id: str
    job_id: str
    applicant_uid: str
    resume_path: str
    cover_letter: Optional[str] = None
    status: ApplicationStatus
    notes: Optional[str] = None
    dedupe_key: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class ResumeUploadResponse(BaseModel):
    path: str
    size: int


class SignedUrlResponse(BaseModel):
    url: str
    expires_in: int
