from __future__ import annotations
import os

# Settings are read at import time; pin a hermetic environment before gateway is imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ["SUBMISSION_STORE"] = "memory"
os.environ["FILE_STORAGE"] = "inline"
os.environ["ADMIN_PASSWORD"] = "letmein-admin"
os.environ["ADMIN_PASSWORD_HASH"] = ""
for var in ("SMTP_HOST", "SMTP_USER", "SMTP_PASS", "EMAIL_FROM", "ADMIN_EMAIL"):
    os.environ[var] = ""

import httpx
import pytest
import pytest_asyncio

from gateway.config import settings
from gateway.services.files import InlineFileStorage, ObjectFileStorage
from gateway.services.repository import InMemorySubmissionRepository
from gateway.services.storage import ObjectStore
from gateway.services.workflow import SubmissionWorkflow

from factories import FakeMinio, RecordingMailer, StepClock


@pytest.fixture
def test_settings():
    return settings.model_copy(update={"admin_email": "owner@example.com", "max_files": 5})


@pytest.fixture
def repository():
    return InMemorySubmissionRepository(clock=StepClock())


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def fake_minio():
    return FakeMinio()


@pytest.fixture
def object_storage(fake_minio):
    store = ObjectStore(fake_minio, "test-uploads")
    store.ensure_bucket()
    return ObjectFileStorage(store, "http://files.test")


@pytest.fixture
def workflow(repository, mailer, test_settings):
    return SubmissionWorkflow(repository, InlineFileStorage(), mailer, test_settings)


@pytest.fixture
def object_workflow(repository, mailer, test_settings, object_storage):
    return SubmissionWorkflow(repository, object_storage, mailer, test_settings)


@pytest_asyncio.fixture
async def client(workflow):
    from gateway.deps import get_workflow
    from gateway.main import app

    app.dependency_overrides[get_workflow] = lambda: workflow
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    from gateway.security import make_access_token

    return {"Authorization": f"Bearer {make_access_token()}"}
