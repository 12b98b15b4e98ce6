"""Security utilities: identity tokens, principals, roles."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from app.config import settings
from app.core.exceptions import InvalidToken, Unauthenticated
from app.utils.constants import UserRole

# Re-exported for callers that think in terms of roles
Role = UserRole


@dataclass(frozen=True)
class VerifiedIdentity:
    """What the identity provider vouches for after checking a token."""

    uid: str
    email: str
    email_verified: bool = False
    display_name: str = ""


@dataclass(frozen=True)
class Principal:
    """
    Caller of a workflow operation.

    Built once per request from the stored user, so the role is a snapshot
    and cannot change halfway through an operation.
    """

    uid: str
    email: str
    email_verified: bool
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_employer(self) -> bool:
        return self.role == UserRole.EMPLOYER

    @property
    def is_seeker(self) -> bool:
        return self.role == UserRole.SEEKER


def create_access_token(
    uid: str,
    email: str,
    email_verified: bool = False,
    display_name: str = "",
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a signed identity token (used by the sign-in front end and tests)."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "sub": uid,
        "email": email,
        "email_verified": email_verified,
        "name": display_name,
        "exp": datetime.now(timezone.utc) + expires_delta,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise InvalidToken() from exc


class JWTIdentityProvider:
    """Verifies HS256 bearer tokens and returns the identity they carry."""

    def verify(self, token: str) -> VerifiedIdentity:
        if not token:
            raise Unauthenticated()

        payload = decode_token(token)
        if payload.get("type", "access") != "access":
            raise InvalidToken("Token is not an access token")

        uid = payload.get("sub")
        email = payload.get("email")
        if not uid or not email:
            raise InvalidToken()

        return VerifiedIdentity(
            uid=str(uid),
            email=str(email).lower(),
            email_verified=bool(payload.get("email_verified", False)),
            display_name=payload.get("name") or "",
        )
