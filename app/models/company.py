"""Company (institution) model."""

from sqlalchemy import Column, String, Text

from app.db.base import Base, JSONType


class Company(Base):
    """Hiring institution. One per owner."""

    __tablename__ = "companies"

    name = Column(String(255), nullable=False, index=True)
    website = Column(String(500))
    institute_type = Column(String(50), nullable=False)
    hr_email = Column(String(255), nullable=False)
    address = Column(Text, nullable=False)
    phone = Column(String(50))
    logo_path = Column(String(500))
    proof_docs = Column(JSONType, default=list)  # ["proofs/<company_id>/<file>", ...]

    owner_uid = Column(String(64), unique=True, index=True, nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, approved, rejected

    def __repr__(self):
        return f"<Company {self.name} ({self.status})>"
