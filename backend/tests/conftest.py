"""
Shared fixtures: in-memory database, API client, users and a fake AI engine
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ.pop("OPENAI_API_KEY", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from convertia.ai_engine.service import AIEngine, get_ai_engine
from convertia.auth.service import (
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_RECRUITER,
    ROLE_RRHH,
    create_access_token,
    create_user,
)
from convertia.core.database import Base, SessionLocal
from convertia.core.exceptions import AIEngineError
from convertia.main import app
import convertia.models  # noqa: F401

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
# Routes, services and Celery tasks all open sessions from SessionLocal
SessionLocal.configure(bind=test_engine)


class FakeAIEngine(AIEngine):
    """Records chat-completion calls and answers from a queue"""

    def __init__(self):
        super().__init__(client=object())
        self.replies = []
        self.calls = []
        self.error = None

    def chat_completion(self, messages, temperature=None, max_tokens=None):
        self.calls.append({"messages": messages, "max_tokens": max_tokens})
        if self.error:
            raise AIEngineError(self.error)
        if self.replies:
            return self.replies.pop(0)
        return "Hola, ¿qué productos me puede ofrecer?"


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_ai():
    engine = FakeAIEngine()
    app.dependency_overrides[get_ai_engine] = lambda: engine
    yield engine
    app.dependency_overrides.pop(get_ai_engine, None)


@pytest.fixture
def client(fake_ai):
    return TestClient(app)


def _headers(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': user.email, 'user_id': user.id})}"}


@pytest.fixture
def admin(db):
    return create_user(db, "admin@convertia.com", "admin-pass", "Admin", [ROLE_ADMIN])


@pytest.fixture
def recruiter(db):
    return create_user(db, "recruiter@convertia.com", "recruiter-pass", "Rita Recruiter", [ROLE_RECRUITER])


@pytest.fixture
def manager(db):
    return create_user(db, "manager@convertia.com", "manager-pass", "Mario Manager", [ROLE_MANAGER])


@pytest.fixture
def rrhh_user(db):
    return create_user(db, "rrhh@convertia.com", "rrhh-pass", "Rosa RRHH", [ROLE_RRHH])


@pytest.fixture
def admin_headers(admin):
    return _headers(admin)


@pytest.fixture
def recruiter_headers(recruiter):
    return _headers(recruiter)


@pytest.fixture
def manager_headers(manager):
    return _headers(manager)


@pytest.fixture
def rrhh_headers(rrhh_user):
    return _headers(rrhh_user)
