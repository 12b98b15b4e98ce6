"""Shared schema pieces: response envelope, pagination, URL validation."""

from typing import Annotated, Generic, List, Optional, TypeVar

from pydantic import AfterValidator, AnyHttpUrl, BaseModel, TypeAdapter

T = TypeVar("T")

_http_url = TypeAdapter(AnyHttpUrl)


def check_http_url(value: Optional[str]) -> Optional[str]:
    """Validate an http(s) URL but keep the caller's string unchanged."""
    if value is None or value == "":
        return None
    _http_url.validate_python(value)
    return value


class APIResponse(BaseModel, Generic[T]):
    """Uniform response envelope."""

    success: bool = True
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None


class Page(BaseModel, Generic[T]):
    """One page of results."""

    items: List[T]
    total: int
    page: int
    limit: int
    has_more: bool


def ok(data=None, message: Optional[str] = None) -> dict:
    """Success envelope."""
    return {"success": True, "data": data, "error": None, "message": message}


def failure(error: str, message: str) -> dict:
    """Error envelope."""
    return {"success": False, "data": None, "error": error, "message": message}


# str that must be an http(s) URL
HttpUrlStr = Annotated[str, AfterValidator(check_http_url)]


def reject_explicit_nulls(model: BaseModel, clearable: frozenset) -> None:
    """Raise if a field outside ``clearable`` was sent as null in a partial update."""
    for name in sorted(model.model_fields_set - clearable):
        if getattr(model, name) is None:
            raise ValueError(f"{name} cannot be null")
