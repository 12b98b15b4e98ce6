"""Admin and statistics schemas."""

from datetime import datetime
from typing import Any, Dict

from pydantic import AliasChoices, BaseModel, Field


class StatsResponse(BaseModel):
    """Platform-wide counts."""

    total_jobs: int
    total_applications: int
    total_employers: int
    total_seekers: int
    pending_jobs: int
    pending_employers: int
    active_jobs: int


class AuditLogResponse(BaseModel):
    """One audit entry. Stored ``details`` are exposed as ``metadata``."""

    id: str
    actor_uid: str
    action: str
    target_type: str
    target_id: str
    metadata: Dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("metadata", "details")
    )
    timestamp: datetime = Field(validation_alias=AliasChoices("timestamp", "created_at"))


class UserDeletedResponse(BaseModel):
    uid: str
    applications_removed: int
    jobs_removed: int
    companies_removed: int
