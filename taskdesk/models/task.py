"""
Task model for tracked work requests.
"""
from sqlalchemy import Column, String, Text, DateTime, Integer, Date, Boolean, JSON, Enum, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from ..database import Base


class TaskType(str, enum.Enum):
    TASK = "task"
    ENGINEERING_REQUEST = "engineering_request"
    BUSINESS_ONBOARDING = "business_onboarding"
    FUNCTIONALITY_REVIEW = "functionality_review"


class TaskStatus(str, enum.Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    COMPLETED = "completed"
    # Legacy spelling of IN_PROGRESS still present in older rows.
    # Normalised on input, counted as in-progress everywhere.
    IN_PROGRESS_LEGACY = "inProgress"


IN_PROGRESS_STATUSES = (TaskStatus.IN_PROGRESS, TaskStatus.IN_PROGRESS_LEGACY)


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


def _enum_values(enum_class):
    return [e.value for e in enum_class]


class Task(Base):
    """
    Task represents a request raised by one user and assigned to another.
    """
    __tablename__ = "tasks"

    # Primary key
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Relationships
    requested_by_id = Column(String(128), ForeignKey('users.id'), nullable=False, index=True)
    assigned_to_id = Column(String(128), ForeignKey('users.id'), nullable=False, index=True)

    # Task details
    title = Column(String(255), nullable=False, comment="Task title/name")
    type = Column(
        Enum(TaskType, values_callable=_enum_values, name="tasktype"),
        nullable=False,
        default=TaskType.TASK,
    )
    priority = Column(
        Enum(TaskPriority, values_callable=_enum_values, name="taskpriority"),
        nullable=False,
        default=TaskPriority.MEDIUM,
        index=True,
    )
    status = Column(
        Enum(TaskStatus, values_callable=_enum_values, name="taskstatus"),
        nullable=False,
        default=TaskStatus.NEW,
        index=True,
    )
    description = Column(Text, nullable=False)
    business_justification = Column(Text, nullable=False)
    technical_requirements = Column(Text, nullable=True)
    dependencies = Column(Text, nullable=True)
    acceptance_criteria = Column(Text, nullable=False)
    admin_panel_link = Column(String(2048), nullable=True)

    # Effort tracking
    story_points = Column(Integer, nullable=False, default=0)
    progress = Column(Integer, nullable=True, default=0, comment="0-100")

    attachments = Column(JSON, nullable=False, default=list, comment="Ordered list of attachment URLs")

    # Dates
    target_completion_date = Column(Date, nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True, comment="When task was completed")

    # Soft delete
    is_deleted = Column(Boolean, nullable=False, default=False, comment="Whether the task has been soft deleted")
    deleted_at = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    requested_by = relationship("User", foreign_keys=[requested_by_id], back_populates="requested_tasks")
    assigned_to = relationship("User", foreign_keys=[assigned_to_id], back_populates="assigned_tasks")

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title}', status='{self.status}', priority='{self.priority}')>"
