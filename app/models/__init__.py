"""Database models."""

from app.models.user import User
from app.models.company import Company
from app.models.job import Job
from app.models.application import Application
from app.models.audit_log import AuditLog

# Export all models
__all__ = [
    "User",
    "Company",
    "Job",
    "Application",
    "AuditLog",
]
