"""
Task lifecycle rules applied on every create, update and status change.
"""
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from ..models.task import Task, TaskStatus


def enforce_completion(task: Task, previous_status: Optional[TaskStatus] = None, now: Optional[datetime] = None) -> None:
    """
    A completed task always has progress 100 and a completion stamp.

    The stamp is set when the task moves into ``completed`` or when it has
    none yet. Leaving ``completed`` keeps whatever progress and stamp the
    task already carries.
    """
    if task.status != TaskStatus.COMPLETED:
        return

    task.progress = 100
    if previous_status != TaskStatus.COMPLETED or task.completed_at is None:
        task.completed_at = now or datetime.utcnow()


def apply_task_changes(task: Task, changes: Dict[str, Any], now: Optional[datetime] = None) -> Task:
    """Apply a partial update to ``task`` and then the completion rule."""
    previous_status = task.status
    for field, value in changes.items():
        setattr(task, field, value)
    enforce_completion(task, previous_status=previous_status, now=now)
    return task


def append_attachments(task: Task, urls: Iterable[str]) -> Task:
    """Append uploaded URLs after the existing attachments."""
    urls = list(urls)
    if urls:
        # Reassign so the JSON column is flagged dirty
        task.attachments = list(task.attachments or []) + urls
    return task


def task_upload_prefix(now: Optional[datetime] = None) -> str:
    """Storage prefix for task attachments, grouped by upload day."""
    now = now or datetime.utcnow()
    return f"tasks/{now.year}/{now.month:02d}/{now.day:02d}"
