"""
Test configuration and fixtures.

Provides:
- A fresh in-memory SQLite database per test (foreign keys enforced)
- Session cookie minting for authenticated tests
- HTTPX AsyncClient with CSRF header
- In-memory storage and compute backends
"""
import os
import uuid
from dataclasses import dataclass, field
from typing import AsyncGenerator, Generator

os.environ["TESTING"] = "1"
os.environ["ENV"] = "dev"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["COMPUTE_CALLBACK_SECRET"] = "test-compute-secret"
os.environ["BILLING_WEBHOOK_SECRET"] = "whsec_test"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from eventphoto.core.deps import get_compute, get_db, get_storage
from eventphoto.core.exceptions import UpstreamFailure
from eventphoto.core.security import COOKIE_NAME, create_session_token, hash_password
from eventphoto.db.base import Base
from eventphoto.db.enums import Role
from eventphoto.db.models import Event, Organization, OrganizationUser, User
from eventphoto.db.session import create_db_engine, create_session_factory
from eventphoto.main import app

TEST_PASSWORD = "correct-horse-battery"
COMPUTE_SECRET = "test-compute-secret"


# =============================================================================
# Fake external backends
# =============================================================================

class FakeStorage:
    """In-memory StorageBackend."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_upload = False
        self.fail_delete = False

    def upload(self, data: bytes, path_hint: str, content_type: str) -> str:
        if self.fail_upload:
            raise UpstreamFailure("storage unavailable")
        url = f"memory://{path_hint}/{uuid.uuid4().hex}"
        self.objects[url] = data
        return url

    def delete(self, url: str) -> None:
        if self.fail_delete:
            raise UpstreamFailure("storage unavailable")
        self.objects.pop(url, None)
        self.deleted.append(url)


class FakeCompute:
    """In-memory ComputeTrigger."""

    def __init__(self):
        self.submissions: list[tuple[uuid.UUID, uuid.UUID]] = []
        self.fail = False

    def submit_face_matching(self, event_id, task_id) -> None:
        if self.fail:
            raise UpstreamFailure("compute unavailable")
        self.submissions.append((event_id, task_id))


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def engine():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Generator[Session, None, None]:
    """Session on a throwaway database; app code may commit freely."""
    session = create_session_factory(engine)()
    yield session
    session.close()


def make_user(db: Session, org: Organization | None, role: Role = Role.ORGANIZATION_ADMIN) -> User:
    user = User(
        email=f"test-{uuid.uuid4().hex[:8]}@test.com",
        password_hash=hash_password(TEST_PASSWORD),
        display_name="Test User",
        role=role.value,
    )
    db.add(user)
    db.flush()
    if org is not None:
        db.add(OrganizationUser(user_id=user.id, org_id=org.id))
    db.commit()
    return user


@pytest.fixture(scope="function")
def test_org(db: Session) -> Organization:
    """Create a test organization."""
    org = Organization(name="Test Organization")
    db.add(org)
    db.commit()
    return org


@pytest.fixture(scope="function")
def test_user(db: Session, test_org: Organization) -> User:
    """Create an admin user with membership in test_org."""
    return make_user(db, test_org)


@pytest.fixture(scope="function")
def test_event(db: Session, test_org: Organization) -> Event:
    from datetime import datetime, timezone

    event = Event(
        org_id=test_org.id,
        name="Spring Gala",
        date_start=datetime(2026, 5, 1, 18, 0, tzinfo=timezone.utc),
    )
    db.add(event)
    db.commit()
    return event


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    user: User
    org: Organization
    token: str
    cookie_name: str = field(default=COOKIE_NAME)


def make_auth(user: User, org: Organization) -> TestAuth:
    token = create_session_token(user_id=user.id, token_version=user.token_version)
    return TestAuth(user=user, org=org, token=token)


@pytest.fixture(scope="function")
def test_auth(test_user: User, test_org: Organization) -> TestAuth:
    return make_auth(test_user, test_org)


@pytest.fixture(scope="function")
def other_org_auth(db: Session) -> TestAuth:
    """An admin of a second, unrelated organization."""
    org = Organization(name="Other Organization")
    db.add(org)
    db.commit()
    return make_auth(make_user(db, org), org)


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture(scope="function")
def fake_compute() -> FakeCompute:
    return FakeCompute()


@pytest.fixture(scope="function")
def app_overrides(db: Session, fake_storage: FakeStorage, fake_compute: FakeCompute):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: fake_storage
    app.dependency_overrides[get_compute] = lambda: fake_compute
    yield
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client_factory(app_overrides):
    """Build an AsyncClient for any session token (use with `async with`)."""

    def _build(token: str | None = None, csrf: bool = True) -> AsyncClient:
        cookies = {COOKIE_NAME: token} if token else None
        headers = {"X-Requested-With": "XMLHttpRequest"} if csrf else None
        return AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            cookies=cookies,
            headers=headers,
        )

    return _build


@pytest.fixture(scope="function")
async def client(client_factory) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated client (CSRF header set)."""
    async with client_factory() as c:
        yield c


@pytest.fixture(scope="function")
async def authed_client(client_factory, test_auth: TestAuth) -> AsyncGenerator[AsyncClient, None]:
    """Client with a session cookie for test_user and the CSRF header."""
    async with client_factory(test_auth.token) as c:
        yield c


# =============================================================================
# Factories
# =============================================================================

@pytest.fixture(scope="function")
def test_password() -> str:
    return TEST_PASSWORD


@pytest.fixture(scope="function")
def user_factory(db: Session):
    """make(org=None, role=ORGANIZATION_ADMIN) -> User"""

    def _make(org: Organization | None = None, role: Role = Role.ORGANIZATION_ADMIN) -> User:
        return make_user(db, org, role)

    return _make


@pytest.fixture(scope="function")
def auth_factory():
    """make(user, org) -> TestAuth"""
    return make_auth
