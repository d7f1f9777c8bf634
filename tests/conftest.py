# tests/conftest.py

import os
import tempfile
from datetime import date, datetime, timedelta
from itertools import count

# Configure before taskdesk.config builds its settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="taskdesk-files-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from taskdesk.database import Base, get_db
from taskdesk.main import app
from taskdesk.models import Task, TaskPriority, TaskStatus, TaskType, User, UserRole, UserStatus
from taskdesk.services.attachment_uploader import get_uploader
from taskdesk.services.identity_provider import Identity, get_identity_provider

from .fakes import FakeIdentityProvider, FakeUploader

ADMIN_ID = "auth0|admin"
MEMBER_ID = "auth0|member"
ADMIN_TOKEN = "admin-token"
MEMBER_TOKEN = "member-token"


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def db_session():
    """
    Fresh in-memory SQLite database per test.

    StaticPool keeps one connection so the app and the test see the same data.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def identity_provider() -> FakeIdentityProvider:
    provider = FakeIdentityProvider()
    provider.add_token(ADMIN_TOKEN, Identity(subject_id=ADMIN_ID, email="admin@example.com", display_name="Ada Admin"))
    provider.add_token(MEMBER_TOKEN, Identity(subject_id=MEMBER_ID, email="member@example.com", display_name="Max Member"))
    return provider


@pytest.fixture()
def uploader() -> FakeUploader:
    return FakeUploader()


@pytest.fixture()
def admin_user(db_session) -> User:
    user = User(
        id=ADMIN_ID,
        name="Ada Admin",
        email="admin@example.com",
        role=UserRole.ADMIN,
        status=UserStatus.ACTIVE,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def member_user(db_session) -> User:
    user = User(
        id=MEMBER_ID,
        name="Max Member",
        email="member@example.com",
        role=UserRole.USER,
        status=UserStatus.ACTIVE,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def client(db_session, identity_provider, uploader, admin_user, member_user):
    """TestClient with the database and external collaborators replaced."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider
    app.dependency_overrides[get_uploader] = lambda: uploader
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_task(db_session, admin_user, member_user):
    """Insert a task directly; each call is created one minute after the previous one."""
    sequence = count()
    start = datetime(2026, 1, 1, 9, 0, 0)

    def _make_task(**overrides) -> Task:
        created_at = start + timedelta(minutes=next(sequence))
        values = dict(
            title="Prepare release notes",
            type=TaskType.TASK,
            priority=TaskPriority.MEDIUM,
            status=TaskStatus.NEW,
            target_completion_date=date(2026, 2, 1),
            description="Summarise the changes in this release",
            business_justification="Customers ask what changed",
            acceptance_criteria="Notes published",
            requested_by_id=admin_user.id,
            assigned_to_id=member_user.id,
            story_points=3,
            progress=0,
            attachments=[],
            created_at=created_at,
            updated_at=created_at,
        )
        values.update(overrides)
        task = Task(**values)
        db_session.add(task)
        db_session.commit()
        return task

    return _make_task
