"""
Pydantic schemas package.
"""
from .user import (
    SortOrder,
    UserSortField,
    UserSummary,
    UserResponse,
    UserCreate,
    UserStatusUpdate,
    UserProfileUpdate,
    UserFilter,
    UserListResponse,
    MessageResponse,
)

from .task import (
    TaskSortField,
    TaskCreate,
    TaskUpdate,
    TaskStatusUpdate,
    TaskFilter,
    TaskResponse,
)

from .dashboard import (
    TaskStats,
    UserStats,
    DashboardResponse,
    TaskMetrics,
    ProductivityMetrics,
    TimelineMetrics,
    QualityMetrics,
    UserReportResponse,
)

__all__ = [
    # User schemas
    "SortOrder",
    "UserSortField",
    "UserSummary",
    "UserResponse",
    "UserCreate",
    "UserStatusUpdate",
    "UserProfileUpdate",
    "UserFilter",
    "UserListResponse",
    "MessageResponse",
    # Task schemas
    "TaskSortField",
    "TaskCreate",
    "TaskUpdate",
    "TaskStatusUpdate",
    "TaskFilter",
    "TaskResponse",
    # Dashboard schemas
    "TaskStats",
    "UserStats",
    "DashboardResponse",
    "TaskMetrics",
    "ProductivityMetrics",
    "TimelineMetrics",
    "QualityMetrics",
    "UserReportResponse",
]
