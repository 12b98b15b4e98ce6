"""User model."""

from sqlalchemy import Boolean, Column, String

from app.db.base import Base


class User(Base):
    """Marketplace account. ``id`` is the identity provider's subject."""

    __tablename__ = "users"

    display_name = Column(String(255), nullable=False, default="")
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(String(20), nullable=False, default="seeker")  # seeker, employer, admin
    email_verified = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
