"""
Shared fixtures.

Environment is configured before anything under ``app`` is imported, since
settings are read once at import time.
"""

import os
import tempfile
from datetime import timedelta
from typing import Any, Dict, List, Optional

os.environ["STORE_BACKEND"] = "memory"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["SMTP_HOST"] = ""
os.environ["SENTRY_DSN"] = ""
os.environ["DEBUG"] = "false"
os.environ["LOG_FORMAT"] = "console"
os.environ["ADMIN_EMAILS"] = "admin@facultyjobs.test"
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["BLOB_STORAGE_DIR"] = tempfile.mkdtemp(prefix="faculty-jobs-blobs-")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.core.security import VerifiedIdentity, create_access_token  # noqa: E402
from app.main import create_app  # noqa: E402
from app.repositories.memory_store import InMemoryStore  # noqa: E402
from app.schemas.company import CompanyCreate  # noqa: E402
from app.schemas.job import JobCreate  # noqa: E402
from app.services.blob_storage import LocalBlobStore  # noqa: E402
from app.services.notifier import NotificationKind, Notifier  # noqa: E402
from app.services.workflow import MarketplaceWorkflow  # noqa: E402
from app.utils.helpers import utcnow  # noqa: E402

ADMIN_EMAIL = "admin@facultyjobs.test"
EMPLOYER_EMAIL = "hr.owner@iitb.ac.in"
SEEKER_EMAIL = "asha.rao@example.com"

PDF_BYTES = b"%PDF-1.4\n1 0 obj <<>> endobj\ntrailer <<>>\n%%EOF"


class RecordingNotifier(Notifier):
    """Keeps every notification in memory instead of sending it."""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []

    async def send(self, to_address: str, kind: NotificationKind, data: Dict[str, Any]) -> bool:
        self.sent.append({"to": to_address, "kind": kind, "data": data})
        return True

    def kinds(self) -> List[NotificationKind]:
        return [message["kind"] for message in self.sent]


class FailingNotifier(Notifier):
    async def send(self, to_address: str, kind: NotificationKind, data: Dict[str, Any]) -> bool:
        raise ConnectionError("SMTP server unreachable")


def identity(uid: str, email: str, verified: bool = True, name: str = "") -> VerifiedIdentity:
    return VerifiedIdentity(uid=uid, email=email, email_verified=verified, display_name=name)


def company_payload(**overrides) -> CompanyCreate:
    data = {
        "name": "Indian Institute of Technology Bombay",
        "website": "https://www.iitb.ac.in",
        "institute_type": "IIT",
        "hr_email": "faculty.recruitment@iitb.ac.in",
        "address": "Powai, Mumbai, Maharashtra 400076",
        "phone": "+91 22 2572 2545",
    }
    data.update(overrides)
    return CompanyCreate(**data)


def job_payload(**overrides) -> JobCreate:
    data = {
        "title": "Assistant Professor of Mathematics",
        "department": "Mathematics",
        "level": "Assistant Professor",
        "institute_type": "IIT",
        "employment_type": "Full-time",
        "location": {"city": "Mumbai", "state": "Maharashtra"},
        "min_salary": 100000,
        "max_salary": 150000,
        "qualifications": ["PhD in Mathematics"],
        "skills": ["Algebraic topology", "Teaching"],
        "description": "The department invites applications for a tenure-track position in pure mathematics.",
        "last_date": utcnow() + timedelta(days=30),
    }
    data.update(overrides)
    return JobCreate(**data)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(str(tmp_path / "blobs"), base_url="http://testserver")


@pytest.fixture
def workflow(store, notifier, blob_store):
    return MarketplaceWorkflow(store, notifier, blob_store)


class Marketplace:
    """An admin, an employer with an approved institution, and a seeker."""

    def __init__(self, workflow: MarketplaceWorkflow):
        self.workflow = workflow
        self.admin = None
        self.employer = None
        self.seeker = None
        self.company = None

    async def setup(self):
        wf = self.workflow
        self.admin = await wf.sign_in(identity("admin-1", ADMIN_EMAIL, name="Site Admin"))
        owner = await wf.sign_in(identity("employer-1", EMPLOYER_EMAIL, name="Dean of Faculty"))
        self.seeker = await wf.sign_in(identity("seeker-1", SEEKER_EMAIL, name="Asha Rao"))

        company = await wf.create_company(owner, company_payload())
        self.company = await wf.approve_company(self.admin, company["id"])
        # Role changes show up on the next sign-in
        self.employer = await wf.sign_in(identity("employer-1", EMPLOYER_EMAIL))
        return self

    async def approved_job(self, **overrides) -> Dict[str, Any]:
        job = await self.workflow.create_job(self.employer, job_payload(**overrides))
        return await self.workflow.approve_job(self.admin, job["id"])

    async def resume(self, principal=None, filename: str = "cv.pdf") -> str:
        uploaded = await self.workflow.upload_resume(principal or self.seeker, filename, PDF_BYTES)
        return uploaded["path"]

    async def seeker_named(self, uid: str, email: Optional[str] = None):
        return await self.workflow.sign_in(identity(uid, email or f"{uid}@example.com"))


@pytest.fixture
async def marketplace(workflow):
    return await Marketplace(workflow).setup()


# ==================== HTTP ==================== #


@pytest.fixture
def app_store():
    return InMemoryStore()


@pytest.fixture
def app_notifier():
    return RecordingNotifier()


@pytest.fixture
def client(app_store, app_notifier, tmp_path):
    app = create_app(
        store=app_store,
        notifier=app_notifier,
        blob_store=LocalBlobStore(str(tmp_path / "uploads"), base_url="http://testserver"),
        enable_scheduler=False,
    )
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(uid: str, email: str, verified: bool = True) -> Dict[str, str]:
    token = create_access_token(uid, email, email_verified=verified, display_name=uid)
    return {"Authorization": f"Bearer {token}"}
