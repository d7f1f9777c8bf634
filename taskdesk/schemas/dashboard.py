from pydantic import BaseModel
from typing import List, Optional
from datetime import date

from .task import TaskResponse


class TaskStats(BaseModel):
    """Dashboard-wide task statistics."""
    total_tasks: int = 0
    completed_tasks: int = 0
    in_progress_tasks: int = 0
    new_tasks: int = 0
    in_review_tasks: int = 0
    total_story_points: int = 0
    average_progress: float = 0
    overall_efficiency: float = 0


class UserStats(BaseModel):
    """Statistics for a single assignee."""
    user_id: str
    completed_tasks: int = 0
    total_story_points: int = 0
    average_progress: float = 0
    efficiency: float = 0


class DashboardResponse(BaseModel):
    """Response model for dashboard statistics."""
    task_stats: TaskStats
    user_stats: List[UserStats]
    recent_tasks: List[TaskResponse]


class TaskMetrics(BaseModel):
    total_tasks: int = 0
    completed_tasks: int = 0
    in_progress_tasks: int = 0
    average_completion_time: float = 0  # days from creation to completion
    on_time_delivery: float = 0  # percent of completed tasks


class ProductivityMetrics(BaseModel):
    total_story_points: int = 0
    average_story_points_per_task: float = 0
    story_points_completed: int = 0
    efficiency: float = 0


class TimelineMetrics(BaseModel):
    tasks_completed_on_time: int = 0
    tasks_delayed: int = 0
    average_delay: float = 0  # days


class QualityMetrics(BaseModel):
    tasks_needing_revision: int = 0
    first_time_acceptance_rate: float = 0


class UserReportResponse(BaseModel):
    """Historical report for one user's assigned tasks."""
    user_id: str
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    task_metrics: TaskMetrics
    productivity_metrics: ProductivityMetrics
    timeline_metrics: TimelineMetrics
    quality_metrics: QualityMetrics
