"""
User model.
"""
from sqlalchemy import Column, String, DateTime, Date, Boolean, Text, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from ..database import Base


class UserRole(str, enum.Enum):
    """User role enumeration."""
    USER = "user"
    ADMIN = "admin"
    PROJECT_MANAGER = "project_manager"
    TEAM_LEAD = "team_lead"
    DEVELOPER = "developer"
    DESIGNER = "designer"
    QA = "qa"


class UserStatus(str, enum.Enum):
    """Account status enumeration."""
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    REJECTED = "rejected"


class Department(str, enum.Enum):
    ENGINEERING = "engineering"
    DESIGN = "design"
    PRODUCT_MANAGEMENT = "product_management"
    QUALITY_ASSURANCE = "quality_assurance"
    MARKETING = "marketing"
    SALES = "sales"
    HUMAN_RESOURCES = "human_resources"


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"
    PREFER_NOT_TO_SAY = "Prefer not to say"


def _enum_values(enum_class):
    return [e.value for e in enum_class]


class User(Base):
    """
    User model representing people who request and work on tasks.

    The primary key is the identity provider's subject id (Auth0 ``sub``
    claim); it is never generated locally.
    """
    __tablename__ = "users"

    # Primary Key
    id = Column(
        String(128),
        primary_key=True,
        comment="Identity provider subject id"
    )

    # Basic Information
    name = Column(String(255), nullable=True, comment="User's full name")
    email = Column(String(255), nullable=True, index=True, comment="User's email address")
    phone = Column(String(50), nullable=True)
    photo = Column(Text, nullable=True, comment="URL to user's profile photo")
    birth_date = Column(Date, nullable=True)
    gender = Column(
        Enum(Gender, values_callable=_enum_values, name="gender"),
        nullable=True,
    )

    # Organisation
    role = Column(
        Enum(UserRole, values_callable=_enum_values, name="userrole"),
        default=UserRole.USER,
        nullable=False,
        comment="User role (user, admin, project_manager, team_lead, developer, designer, qa)"
    )
    status = Column(
        Enum(UserStatus, values_callable=_enum_values, name="userstatus"),
        default=UserStatus.PENDING,
        nullable=False,
        index=True,
    )
    department = Column(
        Enum(Department, values_callable=_enum_values, name="department"),
        nullable=True,
    )
    designation = Column(String(255), nullable=True)
    employee_id = Column(
        String(32),
        unique=True,
        nullable=True,
        comment="Sequential employee number assigned on admin creation"
    )

    # Soft delete
    is_deleted = Column(
        Boolean,
        default=False,
        nullable=False,
        comment="Whether the user has been soft deleted"
    )
    deleted_at = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    requested_tasks = relationship(
        "Task",
        foreign_keys="Task.requested_by_id",
        back_populates="requested_by",
    )
    assigned_tasks = relationship(
        "Task",
        foreign_keys="Task.assigned_to_id",
        back_populates="assigned_to",
    )

    def __repr__(self):
        return f"<User {self.id} {self.email}>"
