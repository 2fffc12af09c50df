"""
Enrollment Intake - Test Configuration and Fixtures
"""
import os

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")

from apps.api.auth import IdentityProvider, hash_password
from apps.api.deps import get_blob_store, get_enrollment_repo, get_identity_provider, get_settings
from apps.api.main import app
from core.config import Settings
from domain.value_objects import PhotoUpload
from services.enrollment.draft import ContactDraft, EnrollmentDraft
from services.persistence.object_store import LocalObjectStore

from fakes import InMemoryEnrollmentRepository

ADMIN_EMAIL = "admin@questo.com"
ADMIN_PASSWORD = "libral@500"
BASE_URL = "http://testserver"


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        SECRET_KEY="test-secret-key-for-testing-only",
        ADMIN_EMAIL=ADMIN_EMAIL,
        ADMIN_PWD_HASH=hash_password(ADMIN_PASSWORD),
        STORAGE_ROOT=str(tmp_path / "blobs"),
        PUBLIC_BASE_URL=BASE_URL,
        API_BASE_URL=BASE_URL,
        MAX_UPLOAD_MB=1,
    )


@pytest.fixture
def idp(test_settings) -> IdentityProvider:
    return IdentityProvider(test_settings)


@pytest.fixture
def repo() -> InMemoryEnrollmentRepository:
    return InMemoryEnrollmentRepository()


@pytest.fixture
def blob_store(test_settings) -> LocalObjectStore:
    return LocalObjectStore(test_settings.STORAGE_ROOT, test_settings.PUBLIC_BASE_URL)


@pytest.fixture
def api(test_settings, idp, repo, blob_store):
    """FastAPI app with every backend collaborator overridden."""
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_identity_provider] = lambda: idp
    app.dependency_overrides[get_enrollment_repo] = lambda: repo
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(api):
    with TestClient(api) as c:
        yield c


@pytest.fixture
def anon_headers(idp) -> dict:
    return {"Authorization": f"Bearer {idp.sign_in_anonymously()}"}


@pytest.fixture
def admin_headers(idp) -> dict:
    token = idp.sign_in_with_password(ADMIN_EMAIL, ADMIN_PASSWORD)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def filled_draft() -> EnrollmentDraft:
    draft = EnrollmentDraft()
    draft.form.student_name = "Aarav Shah"
    draft.form.school_name = "Green Valley"
    draft.form.grade = "5"
    draft.form.board = "CBSE"
    draft.form.city = "Pune"
    draft.contacts = [
        ContactDraft(phone="9800000001", contact_name="Meera Shah", relation="parent"),
        ContactDraft(phone="9800000002", contact_name="Ravi Shah", relation="guardian"),
    ]
    return draft


@pytest.fixture
def make_photo():
    def _make(name: str) -> PhotoUpload:
        return PhotoUpload(filename=name, content=b"\x89PNG fake " + name.encode(), content_type="image/png")

    return _make
