"""Company (institution) schemas."""

from datetime import datetime
from typing import Annotated, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, model_validator

from app.schemas.common import HttpUrlStr, reject_explicit_nulls
from app.utils.constants import CompanyStatus, InstituteType
from app.utils.validators import validate_phone


def _check_phone(value: Optional[str]) -> Optional[str]:
    if value is not None and not validate_phone(value):
        raise ValueError("Invalid phone number")
    return value


PhoneStr = Annotated[str, AfterValidator(_check_phone)]


class CompanyCreate(BaseModel):
    """Register an institution."""

    model_config = ConfigDict(use_enum_values=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=255)
    website: Optional[HttpUrlStr] = None
    institute_type: InstituteType
    hr_email: EmailStr
    address: str = Field(..., min_length=10)
    phone: Optional[PhoneStr] = None
    logo_path: Optional[str] = None


# Optional on the record, so a partial update may send null to clear them
CLEARABLE_COMPANY_FIELDS = frozenset({"website", "phone", "logo_path"})


class CompanyUpdate(BaseModel):
    """Partial update. Only fields present in the request are applied."""

    model_config = ConfigDict(use_enum_values=True, str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=2, max_length=255)
    website: Optional[HttpUrlStr] = None
    institute_type: Optional[InstituteType] = None
    hr_email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, min_length=10)
    phone: Optional[PhoneStr] = None
    logo_path: Optional[str] = None

    @model_validator(mode="after")
    def required_fields_not_null(self):
        reject_explicit_nulls(self, CLEARABLE_COMPANY_FIELDS)
        return self


class CompanyStatusUpdate(BaseModel):
    """Admin moderation decision."""

    status: Literal["approved", "rejected"]
    reason: Optional[str] = Field(None, max_length=1000)


class CompanyResponse(BaseModel):
    """Company response schema."""

    id: str
    name: str
    website: Optional[HttpUrlStr] = None
    institute_type: str
    hr_email: str
    address: str
    phone: Optional[PhoneStr] = None
    logo_path: Optional[str] = None
    proof_docs: List[str] = Field(default_factory=list)
    owner_uid: str
    status: CompanyStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
