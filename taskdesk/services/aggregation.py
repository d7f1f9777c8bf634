"""
Dashboard and report aggregation over an already-fetched task set.

Everything here is a pure reduction over ``Task`` objects; the querying and
filtering is done by ``TaskService``.
"""
from datetime import date
from typing import Dict, List, Optional, Sequence

from ..models.task import Task, TaskStatus, IN_PROGRESS_STATUSES
from ..schemas.dashboard import (
    TaskStats,
    UserStats,
    TaskMetrics,
    ProductivityMetrics,
    TimelineMetrics,
    QualityMetrics,
)


def _percent(part: int, whole: int) -> float:
    if not whole:
        return 0
    return part * 100 / whole


def _mean(values: Sequence[float]) -> float:
    if not values:
        return 0
    return sum(values) / len(values)


def _is_completed(task: Task) -> bool:
    return task.status == TaskStatus.COMPLETED


def calculate_task_stats(tasks: Sequence[Task]) -> TaskStats:
    """
    Dashboard-wide statistics.

    ``overall_efficiency`` is guarded on story points but divides by the task
    count: a set with tasks but no story points reports 0.
    """
    total_tasks = len(tasks)
    completed_tasks = sum(1 for t in tasks if _is_completed(t))
    total_story_points = sum(t.story_points or 0 for t in tasks)

    overall_efficiency = 0
    if total_story_points > 0:
        overall_efficiency = _percent(completed_tasks, total_tasks)

    return TaskStats(
        total_tasks=total_tasks,
        completed_tasks=completed_tasks,
        in_progress_tasks=sum(1 for t in tasks if t.status in IN_PROGRESS_STATUSES),
        new_tasks=sum(1 for t in tasks if t.status == TaskStatus.NEW),
        in_review_tasks=sum(1 for t in tasks if t.status == TaskStatus.IN_REVIEW),
        total_story_points=total_story_points,
        average_progress=_mean([t.progress or 0 for t in tasks]),
        overall_efficiency=overall_efficiency,
    )


def calculate_user_stats(tasks: Sequence[Task]) -> List[UserStats]:
    """Per-assignee statistics, in order of each assignee's first task."""
    by_user: Dict[str, List[Task]] = {}
    for task in tasks:
        if not task.assigned_to_id:
            continue
        by_user.setdefault(task.assigned_to_id, []).append(task)

    stats = []
    for user_id, user_tasks in by_user.items():
        completed = sum(1 for t in user_tasks if _is_completed(t))
        story_points = sum(t.story_points or 0 for t in user_tasks)
        stats.append(UserStats(
            user_id=user_id,
            completed_tasks=completed,
            total_story_points=story_points,
            average_progress=_mean([t.progress or 0 for t in user_tasks]),
            efficiency=_percent(completed, len(user_tasks)),
        ))
    return stats


def calculate_user_report(tasks: Sequence[Task], today: Optional[date] = None) -> Dict[str, object]:
    """
    Historical metrics for one user's assigned tasks.

    Returns the four metric groups keyed as in ``UserReportResponse``.
    Completed tasks are on time when they finished on or before their target
    date. Open tasks past their target date count as delayed.
    """
    today = today or date.today()

    total_tasks = len(tasks)
    completed = [t for t in tasks if _is_completed(t)]
    in_progress = [t for t in tasks if t.status in IN_PROGRESS_STATUSES]

    completion_days = []
    on_time = 0
    delays = []
    for task in completed:
        if task.completed_at is None:
            continue
        if task.created_at is not None:
            completion_days.append((task.completed_at - task.created_at).total_seconds() / 86400)
        finished = task.completed_at.date()
        if finished <= task.target_completion_date:
            on_time += 1
        else:
            delays.append((finished - task.target_completion_date).days)

    for task in tasks:
        if not _is_completed(task) and task.target_completion_date < today:
            delays.append((today - task.target_completion_date).days)

    stamped_completed = sum(1 for t in completed if t.completed_at is not None)
    # Completed once, then moved back out of completed
    revisions = sum(1 for t in tasks if t.completed_at is not None and not _is_completed(t))

    total_story_points = sum(t.story_points or 0 for t in tasks)

    return {
        "task_metrics": TaskMetrics(
            total_tasks=total_tasks,
            completed_tasks=len(completed),
            in_progress_tasks=len(in_progress),
            average_completion_time=_mean(completion_days),
            on_time_delivery=_percent(on_time, stamped_completed),
        ),
        "productivity_metrics": ProductivityMetrics(
            total_story_points=total_story_points,
            average_story_points_per_task=_mean([t.story_points or 0 for t in tasks]),
            story_points_completed=sum(t.story_points or 0 for t in completed),
            efficiency=_percent(len(completed), total_tasks),
        ),
        "timeline_metrics": TimelineMetrics(
            tasks_completed_on_time=on_time,
            tasks_delayed=len(delays),
            average_delay=_mean(delays),
        ),
        "quality_metrics": QualityMetrics(
            tasks_needing_revision=revisions,
            first_time_acceptance_rate=_percent(len(completed), len(completed) + revisions),
        ),
    }
