"""
Pytest fixtures for the vendor portal.

Provides:
- In-memory SQLite (StaticPool) session shared by the app and the test
- LocalStorage on a temporary directory in place of S3
- FastAPI TestClient with both dependencies overridden
- Users per role with bearer-token headers
- Portal client factory: SDK sessions talking to the TestClient
"""
import os
import tempfile

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="vendor-portal-uploads-"))
os.environ.setdefault("RATE_LIMIT_REQUESTS", "10000")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vendor_portal.api.deps import get_db
from vendor_portal.client import ClientConfig, SessionContext
from vendor_portal.client.files import PendingFile
from vendor_portal.core.rate_limiter import rate_limiter
from vendor_portal.core.security import create_access_token, get_password_hash
from vendor_portal.db.base import Base
from vendor_portal.db.session import make_engine
from vendor_portal.main import app
from vendor_portal.models.user import User
from vendor_portal.services.storage_service import LocalStorage, get_storage

PASSWORD = "secret123"
FILES_URL = "http://testserver/files"

engine = make_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "uploads"), FILES_URL)


@pytest.fixture
def client(db_session, storage):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_user(db, email: str, role: str, name: str = None) -> User:
    user = User(
        name=name or email.split("@")[0].title(),
        email=email,
        hashed_password=get_password_hash(PASSWORD),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id), user.role)}"}


@pytest.fixture
def vendor_user(db_session):
    return make_user(db_session, "vendor@acme.com", "vendor", name="Acme Supplies")


@pytest.fixture
def other_vendor(db_session):
    return make_user(db_session, "other@globex.com", "vendor", name="Globex")


@pytest.fixture
def finance_user(db_session):
    return make_user(db_session, "finance@til.com", "finance", name="Fiona Finance")


@pytest.fixture
def admin_user(db_session):
    return make_user(db_session, "admin@til.com", "admin", name="Ada Admin")


@pytest.fixture
def vendor_headers(vendor_user):
    return bearer(vendor_user)


@pytest.fixture
def finance_headers(finance_user):
    return bearer(finance_user)


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture
def invoice_payload():
    """A complete submission body with no files attached."""
    return {
        "id": "V001",
        "name": "Acme Supplies",
        "address": "12 MG Road, Bengaluru",
        "state": "Karnataka",
        "gst_number": "29ABCDE1234F1Z5",
        "pan": "ABCDE1234F",
        "billing_location_til": "Bengaluru",
        "til_billing_address": "TIL Campus, Whitefield",
        "til_state": "Karnataka",
        "po_number": "PO-1001",
        "po_date": "2024-05-01",
        "cost_center": "CC-42",
        "sac_code": "998314",
        "service_desc": "IT support, May",
        "taxable_amt": "10000",
        "gst_rate": "18",
        "cgst": "900",
        "sgst": "900",
        "igst": "0",
        "supply_place": "Karnataka",
        "business_name": "TIL",
        "pdfs": {"po_pdf": [], "invoice_pdf": []},
        "email": "vendor@acme.com",
    }


@pytest.fixture
def submit(client, vendor_headers, invoice_payload):
    """Submit an invoice as the vendor; overrides patch the payload."""
    def _submit(headers=None, **overrides):
        body = {**invoice_payload, **overrides}
        response = client.post("/vendor/upload", json=body, headers=headers or vendor_headers)
        assert response.status_code == 201, response.text
        return response.json()
    return _submit


@pytest.fixture
def portal(client, tmp_path):
    """Factory for SDK sessions logged in through the TestClient."""
    def _portal(email: str = None, name: str = "session") -> SessionContext:
        config = ClientConfig(
            base_url="http://testserver",
            timeout=None,
            session_file=str(tmp_path / f"{name}.json"),
        )
        session = SessionContext.from_config(config, http_session=client)
        if email:
            session.login(email, PASSWORD)
        return session
    return _portal


def pdf(name: str) -> PendingFile:
    return PendingFile(name, "application/pdf", b"%PDF-1.4\n% test document\n")
