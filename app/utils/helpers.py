"""Helper utilities."""

import re
import uuid
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Tag naive datetimes as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def new_id() -> str:
    """Generate an opaque record id."""
    return uuid.uuid4().hex


def application_dedupe_key(job_id: str, applicant_uid: str) -> str:
    """Deterministic key allowing one application per job and applicant."""
    return f"{job_id}_{applicant_uid}"


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for storage."""
    # Drop any directory component supplied by the client
    filename = filename.replace("\\", "/").rsplit("/", 1)[-1]
    sanitized = re.sub(r'[^\w\s.-]', '', filename)
    sanitized = re.sub(r'\s+', '_', sanitized).lstrip(".")
    return sanitized[:255] or "file"
