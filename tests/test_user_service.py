"""Service-level tests for user provisioning, creation and deletion failure paths."""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from taskdesk.exceptions import ForbiddenError, IdentityProviderError
from taskdesk.models import User, UserStatus
from taskdesk.schemas.user import UserCreate
from taskdesk.services.identity_provider import Identity
from taskdesk.services.user_service import UserService

from .conftest import MEMBER_ID


@pytest.fixture()
def service(db_session, identity_provider, uploader) -> UserService:
    return UserService(db_session, identity_provider, uploader)


def _failing_commit():
    raise SQLAlchemyError("database is locked")


def test_failed_write_removes_new_identity(service, db_session, identity_provider, monkeypatch) -> None:
    monkeypatch.setattr(db_session, "commit", _failing_commit)

    with pytest.raises(SQLAlchemyError):
        service.create_user(UserCreate(name="Nina New", email="nina@example.com"))

    created = identity_provider.identities["nina@example.com"].subject_id
    assert identity_provider.deleted == [created]
    monkeypatch.undo()
    assert db_session.query(User).filter(User.id == created).count() == 0


def test_failed_write_keeps_existing_identity(service, db_session, identity_provider, monkeypatch) -> None:
    identity_provider.identities["known@example.com"] = Identity(subject_id="auth0|known", email="known@example.com")
    monkeypatch.setattr(db_session, "commit", _failing_commit)

    with pytest.raises(SQLAlchemyError):
        service.create_user(UserCreate(name="Kim Known", email="known@example.com"))

    assert identity_provider.deleted == []


def test_create_revives_soft_deleted_row(service, db_session, identity_provider) -> None:
    db_session.add(User(
        id="auth0|returning",
        name="Old Name",
        email="returning@example.com",
        status=UserStatus.REJECTED,
        employee_id="20007",
        is_deleted=True,
    ))
    db_session.commit()
    identity_provider.identities["returning@example.com"] = Identity(
        subject_id="auth0|returning", email="returning@example.com"
    )

    user = service.create_user(UserCreate(name="Rita Returning", email="returning@example.com"))

    assert user.id == "auth0|returning"
    assert user.is_deleted is False
    assert user.deleted_at is None
    assert user.status == UserStatus.ACTIVE
    assert user.name == "Rita Returning"
    assert user.employee_id == "20007"
    assert not any(call[0] == "create_identity" for call in identity_provider.calls)


def test_deleted_account_cannot_sign_in(service, db_session) -> None:
    db_session.add(User(id="auth0|gone", email="gone@example.com", is_deleted=True))
    db_session.commit()

    with pytest.raises(ForbiddenError):
        service.get_or_create_from_identity(Identity(subject_id="auth0|gone", email="gone@example.com"))

    assert db_session.query(User).filter(User.id == "auth0|gone").count() == 1


def test_failed_revocation_leaves_user_active(service, db_session, identity_provider, member_user) -> None:
    identity_provider.delete_error = IdentityProviderError("Failed to delete user in Auth0")

    with pytest.raises(IdentityProviderError):
        service.delete_user(MEMBER_ID)

    db_session.refresh(member_user)
    assert member_user.is_deleted is False
    assert member_user.status == UserStatus.ACTIVE
