"""
Task service: persistence, filtering and dashboard queries for tasks.
"""
from datetime import date, datetime
from typing import List, Optional
import logging

from fastapi import UploadFile
from sqlalchemy.orm import Session, joinedload

from ..models.task import Task, TaskStatus, IN_PROGRESS_STATUSES
from ..models.user import User
from ..exceptions import NotFoundError
from ..schemas.task import TaskCreate, TaskUpdate, TaskFilter, TaskSortField, TaskResponse
from ..schemas.user import SortOrder
from ..schemas.dashboard import DashboardResponse, UserReportResponse
from .attachment_uploader import AttachmentUploader
from .aggregation import calculate_task_stats, calculate_user_stats, calculate_user_report
from .task_lifecycle import apply_task_changes, append_attachments, task_upload_prefix

logger = logging.getLogger(__name__)

# Columns that may not be cleared by a partial update
REQUIRED_FIELDS = {
    "title", "type", "priority", "status", "target_completion_date", "description",
    "business_justification", "acceptance_criteria", "assigned_to_id", "story_points",
}

RECENT_TASKS_LIMIT = 5


class TaskService:
    """Service for creating, querying and updating tasks."""

    def __init__(self, db: Session, uploader: Optional[AttachmentUploader] = None):
        self.db = db
        self.uploader = uploader

    def _base_query(self):
        return (
            self.db.query(Task)
            .options(joinedload(Task.requested_by), joinedload(Task.assigned_to))
            .filter(Task.is_deleted == False)  # noqa: E712
        )

    def _require_user(self, user_id: str, detail: str = "Assigned user not found.") -> User:
        user = self.db.query(User).filter(User.id == user_id, User.is_deleted == False).first()  # noqa: E712
        if not user:
            raise NotFoundError(detail)
        return user

    async def _upload(self, files: Optional[List[UploadFile]]) -> List[str]:
        if not files:
            return []
        return await self.uploader.upload_many(files, task_upload_prefix())

    @staticmethod
    def _apply_date_range(query, from_date: Optional[date], to_date: Optional[date]):
        # A single bound is ignored
        if from_date and to_date:
            query = query.filter(
                Task.target_completion_date >= from_date,
                Task.target_completion_date <= to_date,
            )
        return query

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, data: TaskCreate, requester: User, files: Optional[List[UploadFile]] = None) -> Task:
        """Create a task requested by ``requester``, uploading any attached files."""
        self._require_user(data.assigned_to_id)

        task = Task(
            **data.model_dump(),
            requested_by_id=requester.id,
            status=TaskStatus.NEW,
            progress=0,
            attachments=[],
        )
        append_attachments(task, await self._upload(files))

        self.db.add(task)
        self.db.commit()

        logger.info(f"✅ Task {task.id} created by {requester.id} for {data.assigned_to_id}")
        return self.get(task.id)

    async def update(self, task_id: int, data: TaskUpdate, files: Optional[List[UploadFile]] = None) -> Task:
        """Apply a partial update; uploaded files are appended to the attachments."""
        task = self.get(task_id)

        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field not in REQUIRED_FIELDS
        }
        if "assigned_to_id" in changes:
            self._require_user(changes["assigned_to_id"])

        apply_task_changes(task, changes)
        append_attachments(task, await self._upload(files))

        self.db.commit()
        self.db.refresh(task)

        logger.info(f"Task {task.id} updated: {', '.join(sorted(changes)) or 'attachments'}")
        return task

    def update_status(self, task_id: int, status: TaskStatus) -> Task:
        task = self.get(task_id)
        apply_task_changes(task, {"status": status})

        self.db.commit()
        self.db.refresh(task)

        logger.info(f"Task {task.id} moved to {task.status.value}")
        return task

    def remove(self, task_id: int) -> None:
        """Soft delete a task. It disappears from every read path."""
        task = self.get(task_id)
        task.is_deleted = True
        task.deleted_at = datetime.utcnow()
        self.db.commit()

        logger.info(f"🗑️ Task {task_id} deleted")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, task_id: int) -> Task:
        task = self._base_query().filter(Task.id == task_id).first()
        if not task:
            raise NotFoundError("Task not found.")
        return task

    def list_tasks(self, filters: TaskFilter) -> List[Task]:
        """
        Filtered task listing.

        Not paginated. Ordered by ``sort_by`` when given, creation time
        otherwise; ties fall back to the newest id first.
        """
        query = self._base_query()

        if filters.search:
            query = query.filter(Task.title.ilike(f"%{filters.search}%"))
        if filters.type:
            query = query.filter(Task.type == filters.type)
        if filters.status:
            if filters.status == TaskStatus.IN_PROGRESS:
                query = query.filter(Task.status.in_(IN_PROGRESS_STATUSES))
            else:
                query = query.filter(Task.status == filters.status)
        if filters.priority:
            query = query.filter(Task.priority == filters.priority)
        if filters.requested_by_id:
            query = query.filter(Task.requested_by_id == filters.requested_by_id)
        if filters.assigned_to_id:
            query = query.filter(Task.assigned_to_id == filters.assigned_to_id)
        query = self._apply_date_range(query, filters.from_date, filters.to_date)

        sort_field = filters.sort_by or TaskSortField.CREATED_AT
        column = getattr(Task, sort_field.value)
        if filters.sort_order == SortOrder.ASC:
            query = query.order_by(column.asc(), Task.id.desc())
        else:
            query = query.order_by(column.desc(), Task.id.desc())

        return query.all()

    def list_my_tasks(self, user: User, filters: TaskFilter) -> List[Task]:
        """Tasks requested by ``user``, with the same filters as ``list_tasks``."""
        filters = filters.model_copy(update={"requested_by_id": user.id})
        return self.list_tasks(filters)

    def recent_tasks(self, limit: int = RECENT_TASKS_LIMIT) -> List[Task]:
        return (
            self._base_query()
            .order_by(Task.created_at.desc(), Task.id.desc())
            .limit(limit)
            .all()
        )

    def dashboard(self, from_date: Optional[date] = None, to_date: Optional[date] = None) -> DashboardResponse:
        """Statistics over tasks in the date range plus the latest tasks overall."""
        query = self._apply_date_range(self._base_query(), from_date, to_date)
        tasks = query.order_by(Task.created_at.asc(), Task.id.asc()).all()

        return DashboardResponse(
            task_stats=calculate_task_stats(tasks),
            user_stats=calculate_user_stats(tasks),
            recent_tasks=[TaskResponse.model_validate(t) for t in self.recent_tasks()],
        )

    def user_report(
        self,
        user_id: str,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> UserReportResponse:
        """Historical metrics over the tasks assigned to one user."""
        self._require_user(user_id, detail="User not found.")

        query = self._base_query().filter(Task.assigned_to_id == user_id)
        tasks = self._apply_date_range(query, from_date, to_date).all()

        return UserReportResponse(
            user_id=user_id,
            from_date=from_date if from_date and to_date else None,
            to_date=to_date if from_date and to_date else None,
            **calculate_user_report(tasks, today=today),
        )
