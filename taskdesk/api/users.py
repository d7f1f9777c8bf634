"""
Users API endpoints for user management.
"""
from fastapi import APIRouter, Depends, Request, status, Query, Form, File, UploadFile
from sqlalchemy.orm import Session
from typing import Annotated, Optional
from datetime import date

from ..database import get_db
from ..models.user import User, Gender
from ..schemas.user import (
    UserCreate,
    UserStatusUpdate,
    UserProfileUpdate,
    UserFilter,
    UserResponse,
    UserListResponse,
    MessageResponse,
)
from ..services.attachment_uploader import AttachmentUploader, get_uploader
from ..services.identity_provider import IdentityProvider, get_identity_provider
from ..services.role_check import get_current_user_from_token, require_admin
from ..services.user_service import UserService
from .forms import form_model

router = APIRouter(prefix="/api/users", tags=["users"])


def get_user_service(
    db: Session = Depends(get_db),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
    uploader: AttachmentUploader = Depends(get_uploader),
) -> UserService:
    return UserService(db, identity_provider, uploader)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    """
    Create a user (admin only).

    The identity is registered with Auth0 when it does not exist yet, and the
    user receives the next employee id.
    """
    return service.create_user(user_data)


@router.get("/all", response_model=UserListResponse)
async def list_users(
    filters: Annotated[UserFilter, Query()],
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    """
    List users (admin only).

    Supports status, role and department filters, a case-insensitive name
    search, sorting and page/limit paging.
    """
    users, total = service.list_users(filters)
    return UserListResponse(users=[UserResponse.model_validate(u) for u in users], total=total)


@router.patch("/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: str,
    status_data: UserStatusUpdate,
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    """Change a user's status, role, department, designation or employee id (admin only)."""
    return service.update_user_status(user_id, status_data)


@router.get("", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user_from_token)):
    return current_user


@router.get("/{user_id}", response_model=UserResponse)
async def get_profile_by_id(
    user_id: str,
    current_user: User = Depends(get_current_user_from_token),
    service: UserService = Depends(get_user_service),
):
    return service.get_active_user(user_id)


@router.patch("", response_model=UserResponse)
async def update_profile(
    request: Request,
    name: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    birth_date: Optional[date] = Form(None),
    gender: Optional[Gender] = Form(None),
    photo: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user_from_token),
    service: UserService = Depends(get_user_service),
):
    """
    Update the current user's profile.

    Accepts multipart/form-data with optional name, phone, birth_date, gender
    and a single ``photo`` file. The email is refreshed from the token.
    """
    profile_data = form_model(
        UserProfileUpdate,
        name=name,
        phone=phone,
        birth_date=birth_date,
        gender=gender,
    )
    identity = getattr(request.state, "identity", None)
    email = identity.email if identity else None

    if photo is not None and not photo.filename:
        photo = None

    return await service.update_profile(current_user, profile_data, photo=photo, email=email)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
):
    """Delete a user (admin only): revokes the Auth0 identity and soft deletes the row."""
    service.delete_user(user_id)
    return MessageResponse(message="User deleted successfully")


@router.delete("", response_model=MessageResponse)
async def delete_profile(
    current_user: User = Depends(get_current_user_from_token),
    service: UserService = Depends(get_user_service),
):
    service.delete_profile(current_user)
    return MessageResponse(message="Profile deleted successfully")
