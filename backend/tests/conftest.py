"""
Shared pytest fixtures.

Settings are read from the environment when ``app.core.config`` is first
imported, so the test environment is set here before any app import.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_URL"] = "http://auth.test"
os.environ["AUTH_ANON_KEY"] = "anon-test-key"
os.environ["LLM_PROVIDER"] = "gemini"
os.environ["GEMINI_API_KEY"] = "gemini-test-key"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEFAULT_TAX_RATE"] = "20"

import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.v1.endpoints import tickets as tickets_endpoint
from app.core.database import Base, get_db
from app.core.exceptions import UnauthorizedError
from app.core.security import CurrentUser, get_current_user
from app.main import app
from app import models  # noqa: F401


USER = CurrentUser(id="user-1", email="agent@example.com")
OTHER_USER = CurrentUser(id="user-2", email="other@example.com")

FLIGHT_JSON = {
    "airline": "Turkish Airlines",
    "pnr": "ABC123",
    "flight_date": "2025-03-10",
    "flight_time": "14:30",
    "origin": "IST",
    "destination": "LHR",
    "passenger_name": "Ayse Yilmaz",
}


class FakeLLM:
    """Stands in for LLMClient; returns a canned output or raises"""

    def __init__(self, output=None, error=None):
        self.output = output if output is not None else json.dumps(FLIGHT_JSON)
        self.error = error
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.output


class FakeResponse:
    """Minimal stand-in for requests.Response"""

    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text or (json.dumps(payload) if payload is not None else "")

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


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
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def auth_state():
    """Mutable switch for the resolver used by the parse endpoint"""
    return {"user": USER, "error": None}


@pytest.fixture
def client(session_factory, fake_llm, auth_state):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    def fake_resolver(authorization):
        if auth_state["error"] is not None:
            raise auth_state["error"]
        if not authorization:
            raise UnauthorizedError()
        return auth_state["user"]

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = lambda: auth_state["user"]
    app.dependency_overrides[tickets_endpoint.get_user_resolver] = lambda: fake_resolver
    app.dependency_overrides[tickets_endpoint.get_llm_factory] = lambda: (lambda: fake_llm)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def customer_id(client):
    response = client.post("/api/v1/customers", json={"name": "Acme Travel", "type": "corporate"})
    assert response.status_code == 201
    return response.json()["id"]
