"""
Domain error taxonomy.

Every error raised by the workflow, policy and store layers derives from
MarketplaceError. The HTTP layer renders them into the response envelope
using ``status_code`` and ``code``.
"""

from typing import Optional


class MarketplaceError(Exception):
    """Base class for all marketplace errors."""

    status_code: int = 500
    code: str = "internal"
    default_message: str = "An error occurred"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class Unauthenticated(MarketplaceError):
    status_code = 401
    code = "unauthenticated"
    default_message = "Authentication required"


class InvalidToken(Unauthenticated):
    code = "invalid_token"
    default_message = "Could not validate credentials"


class EmailNotVerified(MarketplaceError):
    status_code = 403
    code = "email_not_verified"
    default_message = "Email address must be verified"


class PermissionDenied(MarketplaceError):
    status_code = 403
    code = "permission_denied"
    default_message = "Insufficient permissions"


class NotFound(MarketplaceError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"


class AlreadyExists(MarketplaceError):
    """Unique-key conflict, e.g. a second application to the same job."""

    status_code = 409
    code = "already_exists"
    default_message = "Resource already exists"


class DuplicateApplication(AlreadyExists):
    code = "duplicate_application"
    default_message = "You have already applied to this job"


class InvalidArgument(MarketplaceError):
    """Input failed validation. Carries the first failing field only."""

    status_code = 400
    code = "invalid_argument"
    default_message = "Invalid argument"


class PreconditionFailed(MarketplaceError):
    """The entity is not in a state that permits the operation."""

    status_code = 400
    code = "failed_precondition"
    default_message = "Operation not allowed in the current state"


class Internal(MarketplaceError):
    status_code = 500
    code = "internal"
    default_message = "Internal server error"
