"""Application model."""

from sqlalchemy import Column, String, Text

from app.db.base import Base


class Application(Base):
    """A seeker's application to a job."""

    __tablename__ = "applications"

    job_id = Column(String(64), nullable=False, index=True)
    applicant_uid = Column(String(64), nullable=False, index=True)
    resume_path = Column(String(1000), nullable=False)
    cover_letter = Column(Text)
    status = Column(String(20), nullable=False, default="submitted")  # submitted, reviewed, shortlisted, rejected, offered, withdrawn
    notes = Column(Text)

    # "<job_id>_<applicant_uid>", unique so a second insert for the same pair fails
    dedupe_key = Column(String(200), unique=True, nullable=False)

    def __repr__(self):
        return f"<Application {self.applicant_uid} -> {self.job_id}>"
