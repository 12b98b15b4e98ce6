"""Validators."""

import re
from typing import List, Optional

from app.core.exceptions import InvalidArgument


def validate_phone(phone: str) -> bool:
    """Validate phone number."""
    # Simple validation for 10+ digits
    pattern = r'^\+?[\d\s-]{10,}$'
    return bool(re.match(pattern, phone))


def validate_file_extension(filename: str, allowed_extensions: List[str]) -> bool:
    """Validate file extension."""
    if "." not in filename:
        return False
    extension = filename.rsplit(".", 1)[-1].lower()
    return extension in [ext.lower() for ext in allowed_extensions]


def validate_salary_range(min_salary: Optional[float], max_salary: Optional[float]) -> None:
    """Raise InvalidArgument when both bounds are present and min exceeds max."""
    if min_salary is not None and max_salary is not None and min_salary > max_salary:
        raise InvalidArgument(
            "min_salary must not exceed max_salary", field="min_salary"
        )


def validate_upload(
    filename: str,
    size: int,
    allowed_extensions: List[str],
    max_size: int,
    field: str = "file",
) -> None:
    """Check an uploaded file's extension and size."""
    if not filename or not validate_file_extension(filename, allowed_extensions):
        raise InvalidArgument(
            f"File type not allowed. Allowed: {', '.join(allowed_extensions)}",
            field=field,
        )
    if size == 0:
        raise InvalidArgument("File is empty", field=field)
    if size > max_size:
        raise InvalidArgument(
            f"File too large. Maximum size is {max_size // (1024 * 1024)}MB",
            field=field,
        )
