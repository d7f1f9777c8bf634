"""
Pydantic schemas for Task model
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Optional
from datetime import datetime, date
import enum

from ..models.task import TaskType, TaskStatus, TaskPriority
from .user import SortOrder, UserSummary


def normalize_status(value):
    """Map the legacy ``inProgress`` spelling onto ``in_progress``."""
    if value in (TaskStatus.IN_PROGRESS_LEGACY, TaskStatus.IN_PROGRESS_LEGACY.value):
        return TaskStatus.IN_PROGRESS
    return value


class TaskSortField(str, enum.Enum):
    """Columns the task listing may be sorted by."""
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    TITLE = "title"
    TYPE = "type"
    STATUS = "status"
    PRIORITY = "priority"
    TARGET_COMPLETION_DATE = "target_completion_date"
    STORY_POINTS = "story_points"
    PROGRESS = "progress"
    COMPLETED_AT = "completed_at"


# Schema for creating a task
class TaskCreate(BaseModel):
    """Schema for creating a new task"""
    title: str = Field(..., min_length=1, max_length=255, description="Task title/name")
    type: TaskType = Field(..., description="task, engineering_request, business_onboarding, functionality_review")
    priority: TaskPriority = Field(..., description="low, medium, high, urgent")
    target_completion_date: date
    description: str = Field(..., min_length=1)
    business_justification: str = Field(..., min_length=1)
    technical_requirements: Optional[str] = None
    dependencies: Optional[str] = None
    acceptance_criteria: str = Field(..., min_length=1)
    assigned_to_id: str = Field(..., min_length=1, description="Who is assigned to this task")
    story_points: int = Field(..., ge=0)
    admin_panel_link: Optional[str] = Field(None, max_length=2048)


# Schema for updating a task
class TaskUpdate(BaseModel):
    """Schema for updating a task. Only fields that are set are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[TaskType] = None
    priority: Optional[TaskPriority] = None
    target_completion_date: Optional[date] = None
    description: Optional[str] = None
    business_justification: Optional[str] = None
    technical_requirements: Optional[str] = None
    dependencies: Optional[str] = None
    acceptance_criteria: Optional[str] = None
    assigned_to_id: Optional[str] = None
    admin_panel_link: Optional[str] = Field(None, max_length=2048)
    status: Optional[TaskStatus] = None
    story_points: Optional[int] = Field(None, ge=0)
    progress: Optional[int] = Field(None, ge=0, le=100)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_legacy_status(cls, value):
        return normalize_status(value)


class TaskStatusUpdate(BaseModel):
    status: TaskStatus

    @field_validator("status", mode="before")
    @classmethod
    def normalize_legacy_status(cls, value):
        return normalize_status(value)


class TaskFilter(BaseModel):
    """Filters and ordering for task listings"""
    search: Optional[str] = Field(None, description="Case-insensitive title substring")
    type: Optional[TaskType] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    requested_by_id: Optional[str] = None
    assigned_to_id: Optional[str] = None
    from_date: Optional[date] = Field(None, description="Target completion date range start (needs to_date)")
    to_date: Optional[date] = Field(None, description="Target completion date range end (needs from_date)")
    sort_by: Optional[TaskSortField] = None
    sort_order: SortOrder = SortOrder.DESC

    @field_validator("status", mode="before")
    @classmethod
    def normalize_legacy_status(cls, value):
        return normalize_status(value)


# Schema for task response
class TaskResponse(BaseModel):
    """Schema for task response"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    type: TaskType
    priority: TaskPriority
    status: TaskStatus
    target_completion_date: date
    description: str
    business_justification: str
    technical_requirements: Optional[str] = None
    dependencies: Optional[str] = None
    acceptance_criteria: str
    admin_panel_link: Optional[str] = None
    story_points: int
    progress: Optional[int] = None
    attachments: List[str] = []
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    requested_by: Optional[UserSummary] = None
    assigned_to: Optional[UserSummary] = None

    @field_validator("attachments", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value or []
