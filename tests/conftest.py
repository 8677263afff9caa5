"""
Test configuration for the job board authentication API.
"""
import os
import re

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("FRONTEND_URL", "https://jobs.example.com")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jobboard.database import Base, get_db
from jobboard.auth.dependencies import get_mailer
from jobboard.main import app

# Test database URL
TEST_DATABASE_URL = "sqlite://"

# Create test database engine
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Create test session factory
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

RESET_TOKEN_PATTERN = re.compile(r"token=([0-9a-f]{64})")


class FakeMailer:
    """Records messages instead of talking to an SMTP server."""

    def __init__(self, configured: bool = True):
        self.configured = configured
        self.reachable = True
        self.verifications = 0
        self.sent = []

    def is_configured(self) -> bool:
        return self.configured

    def verify_connection(self) -> bool:
        self.verifications += 1
        return self.reachable

    def send(self, to, subject, text, html=None):
        self.sent.append({"to": to, "subject": subject, "text": text, "html": html})

    def reset_token_for(self, email: str) -> str:
        """Pull the clear text reset token out of the last reset email to ``email``."""
        for message in reversed(self.sent):
            match = RESET_TOKEN_PATTERN.search(message["text"])
            if message["to"] == email and match:
                return match.group(1)
        raise AssertionError(f"No reset email sent to {email}")


@pytest.fixture(scope="function")
def db():
    """
    Create a fresh database for each test.
    """
    # Create tables
    Base.metadata.create_all(bind=engine)

    # Create session
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    # Drop tables after test
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def mailer():
    return FakeMailer()


@pytest.fixture(scope="function")
def client(db, mailer):
    """
    Create a test client with a test database session and a recording mailer.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    # Override the dependencies
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer

    # Create test client
    with TestClient(app) as client:
        yield client

    # Remove dependency override
    app.dependency_overrides = {}


@pytest.fixture
def register_job_seeker(client):
    """Factory registering a job seeker through the API."""
    def _register(email="seeker@example.com", password="Password123!", name="Sam Seeker", **extra):
        payload = {"email": email, "password": password, "name": name, **extra}
        return client.post("/api/auth/job-seeker/register", json=payload)
    return _register


@pytest.fixture
def register_employer(client):
    """Factory registering an employer through the API."""
    def _register(email="hr@clinic.example.com", password="Password123!", clinic_name="Green Clinic", **extra):
        payload = {"email": email, "password": password, "clinic_name": clinic_name, **extra}
        return client.post("/api/auth/employer/register", json=payload)
    return _register


@pytest.fixture
def auth_header():
    def _header(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}
    return _header
