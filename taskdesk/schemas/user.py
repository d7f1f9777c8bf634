"""
Pydantic schemas for User model validation and serialization.
"""
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Optional
from datetime import date, datetime
import enum

from ..models.user import UserRole, UserStatus, Department, Gender


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class UserSortField(str, enum.Enum):
    """Columns the admin user listing may be sorted by."""
    CREATED_AT = "created_at"
    NAME = "name"
    EMAIL = "email"
    EMPLOYEE_ID = "employee_id"
    ROLE = "role"
    STATUS = "status"
    DEPARTMENT = "department"


class UserSummary(BaseModel):
    """Compact user representation embedded in task responses."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    photo: Optional[str] = None
    employee_id: Optional[str] = None


class UserResponse(UserSummary):
    """Schema for user response."""
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[Gender] = None
    role: UserRole
    status: UserStatus
    department: Optional[Department] = None
    designation: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UserCreate(BaseModel):
    """Schema for an admin creating a new user."""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    birth_date: Optional[date] = None
    gender: Optional[Gender] = None
    department: Optional[Department] = None
    designation: Optional[str] = Field(None, max_length=255)
    role: Optional[UserRole] = None


class UserStatusUpdate(BaseModel):
    """Schema for an admin changing a user's status, role or placement."""
    status: UserStatus
    role: Optional[UserRole] = None
    department: Optional[Department] = None
    designation: Optional[str] = Field(None, max_length=255)
    employee_id: Optional[str] = Field(None, min_length=1, max_length=32)


class UserProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""
    name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    birth_date: Optional[date] = None
    gender: Optional[Gender] = None


class UserFilter(BaseModel):
    """Filters, ordering and paging for the admin user listing."""
    status: Optional[UserStatus] = None
    role: Optional[UserRole] = None
    department: Optional[Department] = None
    search: Optional[str] = None
    sort_by: UserSortField = UserSortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int


class MessageResponse(BaseModel):
    success: bool = True
    message: str
