"""Shared pytest fixtures for the teamboard test suite.

Every test gets a fresh SQLite in-memory database (StaticPool keeps the one
connection alive across FastAPI's threads) and a recording email sender, so
no external services are needed.
"""
import os

# Must be set before teamboard modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("RESEND_API_KEY", "")

from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from teamboard.database import Base, get_db, get_session_factory
from teamboard.errors import EmailDeliveryError
from teamboard.services.email_sender import EmailSender, get_email_sender

PASSWORD = "secret123"


class RecordingEmailSender(EmailSender):
    """Collects sent messages; flip ``fail`` to simulate a provider outage"""

    def __init__(self):
        self.sent: List[dict] = []
        self.fail = False

    def send(self, sender: str, to: str, subject: str, html: str) -> str:
        if self.fail:
            raise EmailDeliveryError("provider down")
        self.sent.append({"from": sender, "to": to, "subject": subject, "html": html})
        return f"msg-{len(self.sent)}"


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def client(session_factory, email_sender):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def signup(client: TestClient, email: str, name: str = "Test User", token: Optional[str] = None):
    payload = {"email": email, "password": PASSWORD, "name": name}
    if token is not None:
        payload["invitation_token"] = token
    return client.post("/auth/signup", json=payload)


def auth_headers(signup_response) -> dict:
    return {"Authorization": f"Bearer {signup_response.json()['access_token']}"}


@pytest.fixture
def alice(client):
    """A signed-up user; returns (headers, user id, default project id)"""
    response = signup(client, "alice@example.com", "Alice")
    assert response.status_code == 201, response.text
    body = response.json()
    return auth_headers(response), body["user"]["id"], body["default_project"]["id"]


@pytest.fixture
def bob(client):
    response = signup(client, "bob@example.com", "Bob")
    assert response.status_code == 201, response.text
    body = response.json()
    return auth_headers(response), body["user"]["id"], body["default_project"]["id"]


@pytest.fixture
def project(client, alice):
    """A project owned by alice"""
    headers, _, _ = alice
    response = client.post("/projects/", json={"name": "P", "description": "test project"}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()
