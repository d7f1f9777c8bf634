"""
User service for provisioning, administering and profile management.
"""
from datetime import datetime
from typing import List, Optional, Tuple
import logging

from fastapi import UploadFile
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..config import settings
from ..exceptions import ConflictError, ForbiddenError, NotFoundError
from ..models.user import User, UserRole, UserStatus
from ..schemas.user import UserCreate, UserFilter, UserProfileUpdate, UserStatusUpdate, SortOrder
from .attachment_uploader import AttachmentUploader
from .employee_ids import next_employee_id, record_employee_id
from .identity_provider import Identity, IdentityProvider

logger = logging.getLogger(__name__)


class UserService:
    """Service for managing user rows and their identities."""

    def __init__(
        self,
        db: Session,
        identity_provider: Optional[IdentityProvider] = None,
        uploader: Optional[AttachmentUploader] = None,
    ):
        self.db = db
        self.identity_provider = identity_provider
        self.uploader = uploader

    def _active(self):
        return self.db.query(User).filter(User.is_deleted == False)  # noqa: E712

    @staticmethod
    def _soft_delete(user: User) -> None:
        user.is_deleted = True
        user.deleted_at = datetime.utcnow()

    def get_active_user(self, user_id: str) -> User:
        user = self._active().filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found.")
        return user

    def get_or_create_from_identity(self, identity: Identity) -> User:
        """
        Return the user row for a verified identity, creating it on first login.

        New rows are active with role ``user`` and take email, name and photo
        from the token claims. A soft-deleted account may not sign back in.
        """
        user = self.db.query(User).filter(User.id == identity.subject_id).first()
        if user:
            if user.is_deleted:
                raise ForbiddenError("User account has been deleted.")
            return user

        user = User(
            id=identity.subject_id,
            email=identity.email,
            name=identity.display_name,
            photo=identity.picture_url,
            role=UserRole.USER,
            status=UserStatus.ACTIVE,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"✅ Provisioned user {user.id} on first login")
        return user

    def create_user(self, data: UserCreate) -> User:
        """
        Admin user creation.

        Reuses an identity already registered with the email, otherwise creates
        one with the default password. If the database write fails, an identity
        created here is deleted again.
        """
        email = data.email.lower()
        existing = self._active().filter(func.lower(User.email) == email).first()
        if existing:
            raise ConflictError("User with this email already exists")

        created_identity = False
        identity = self.identity_provider.find_by_email(email)
        if identity:
            subject_id = identity.subject_id
        else:
            subject_id = self.identity_provider.create_identity(
                email, settings.DEFAULT_USER_PASSWORD, data.name
            )
            created_identity = True

        try:
            user = self.db.query(User).filter(User.id == subject_id).first()
            if user and not user.is_deleted:
                raise ConflictError("User with this identity already exists")
            if user is None:
                user = User(id=subject_id)
                self.db.add(user)

            user.is_deleted = False
            user.deleted_at = None
            user.email = email
            for field, value in data.model_dump(exclude={"email", "role"}).items():
                setattr(user, field, value)
            user.role = data.role or UserRole.USER
            user.status = UserStatus.ACTIVE
            if not user.employee_id:
                user.employee_id = next_employee_id(self.db)

            self.db.commit()
        except Exception:
            self.db.rollback()
            if created_identity:
                logger.error(f"❌ Failed to store user {subject_id}, removing the new identity")
                self.identity_provider.delete_identity(subject_id)
            raise

        self.db.refresh(user)
        logger.info(f"✅ User {user.id} created with employee id {user.employee_id}")
        return user

    def list_users(self, filters: UserFilter) -> Tuple[List[User], int]:
        """Paged user listing; returns the page and the total match count."""
        query = self._active()

        if filters.status:
            query = query.filter(User.status == filters.status)
        if filters.role:
            query = query.filter(User.role == filters.role)
        if filters.department:
            query = query.filter(User.department == filters.department)
        if filters.search:
            query = query.filter(User.name.ilike(f"%{filters.search}%"))

        total = query.count()

        column = getattr(User, filters.sort_by.value)
        if filters.sort_order == SortOrder.ASC:
            query = query.order_by(column.asc(), User.id.asc())
        else:
            query = query.order_by(column.desc(), User.id.desc())

        users = query.offset((filters.page - 1) * filters.limit).limit(filters.limit).all()
        return users, total

    def update_user_status(self, user_id: str, data: UserStatusUpdate) -> User:
        """Admin change of status, role, department, designation or employee id."""
        user = self.get_active_user(user_id)

        changes = data.model_dump(exclude_unset=True)
        # Role and employee id can be changed but never cleared
        for field in ("role", "employee_id"):
            if changes.get(field) is None:
                changes.pop(field, None)

        employee_id = changes.get("employee_id")
        if employee_id is not None:
            taken = (
                self.db.query(User.id)
                .filter(User.employee_id == employee_id, User.id != user.id)
                .first()
            )
            if taken:
                raise ConflictError(f"Employee id {employee_id} is already assigned")
            record_employee_id(self.db, employee_id)

        for field, value in changes.items():
            setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)

        logger.info(f"User {user.id} updated by admin: {', '.join(sorted(changes))}")
        return user

    async def update_profile(
        self,
        user: User,
        data: UserProfileUpdate,
        photo: Optional[UploadFile] = None,
        email: Optional[str] = None,
    ) -> User:
        """Update the caller's own profile, optionally replacing the photo."""
        if photo:
            user.photo = await self.uploader.upload(photo, f"users/{user.id}")

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        if email:
            user.email = email

        self.db.commit()
        self.db.refresh(user)
        return user

    def delete_user(self, user_id: str) -> None:
        """
        Admin delete: reject and soft delete the row, then revoke the identity.

        The row change is flushed before the identity is revoked and only
        committed afterwards, so a failed revocation leaves the user untouched.
        """
        user = self.get_active_user(user_id)

        user.status = UserStatus.REJECTED
        self._soft_delete(user)
        try:
            self.db.flush()
            self.identity_provider.delete_identity(user.id)
        except Exception:
            self.db.rollback()
            raise
        self.db.commit()

        logger.info(f"🗑️ User {user_id} deleted by admin")

    def delete_profile(self, user: User) -> None:
        self._soft_delete(user)
        self.db.commit()

        logger.info(f"🗑️ User {user.id} deleted their profile")
