"""Job model."""

from sqlalchemy import Column, DateTime, Float, Integer, String, Text

from app.db.base import Base, JSONType


class Job(Base):
    """Faculty job posting."""

    __tablename__ = "jobs"

    title = Column(String(500), nullable=False, index=True)
    department = Column(String(100), nullable=False, index=True)
    level = Column(String(100), nullable=False, index=True)
    institute_type = Column(String(50), nullable=False, index=True)
    employment_type = Column(String(50), nullable=False, index=True)
    location = Column(JSONType, default=dict)  # {"city": "", "state": "", "country": "India"}

    # Compensation
    min_salary = Column(Float, nullable=True)
    max_salary = Column(Float, nullable=True)
    currency = Column(String(10), default="INR")

    # Details
    qualifications = Column(JSONType, default=list)
    skills = Column(JSONType, default=list)
    responsibilities = Column(JSONType, default=list)
    description = Column(Text, nullable=False)
    requirements = Column(Text)
    last_date = Column(DateTime(timezone=True), nullable=False, index=True)

    # Applying
    apply_mode = Column(String(20), default="internal")  # internal, external
    apply_url = Column(String(1000))

    # Ownership (no foreign keys, checked by the workflow)
    company_id = Column(String(64), nullable=False, index=True)
    poster_uid = Column(String(64), nullable=False, index=True)

    # Moderation
    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, approved, rejected, expired
    approved_by = Column(String(64))
    approved_at = Column(DateTime(timezone=True))

    # Stats
    view_count = Column(Integer, default=0, nullable=False)
    application_count = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<Job {self.title} ({self.status})>"
