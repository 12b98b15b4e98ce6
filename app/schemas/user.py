"""User schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.utils.constants import UserRole


class UserResponse(BaseModel):
    """User response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    display_name: str = ""
    email: str
    role: UserRole
    email_verified: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None
