"""
Task CRUD, dashboard and report API endpoints.
"""
from fastapi import APIRouter, Depends, status, Query, Form, File, UploadFile
from sqlalchemy.orm import Session
from typing import Annotated, List, Optional
from datetime import date

from ..config import settings
from ..database import get_db
from ..exceptions import UploadRejectedError
from ..models.user import User
from ..models.task import TaskType, TaskStatus, TaskPriority
from ..schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskStatusUpdate,
    TaskFilter,
    TaskResponse,
)
from ..schemas.dashboard import DashboardResponse, UserReportResponse
from ..schemas.user import MessageResponse
from ..services.attachment_uploader import AttachmentUploader, get_uploader
from ..services.role_check import get_current_user_from_token
from ..services.task_service import TaskService
from .forms import form_model

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def get_task_service(
    db: Session = Depends(get_db),
    uploader: AttachmentUploader = Depends(get_uploader),
) -> TaskService:
    return TaskService(db, uploader)


def _uploaded_files(files: Optional[List[UploadFile]]) -> List[UploadFile]:
    # Browsers send an empty part when no file is picked
    files = [f for f in files or [] if f.filename]
    if len(files) > settings.MAX_TASK_FILES:
        raise UploadRejectedError(f"At most {settings.MAX_TASK_FILES} files can be uploaded per task.")
    return files


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    title: str = Form(...),
    type: TaskType = Form(...),
    priority: TaskPriority = Form(...),
    target_completion_date: date = Form(...),
    description: str = Form(...),
    business_justification: str = Form(...),
    acceptance_criteria: str = Form(...),
    assigned_to_id: str = Form(...),
    story_points: int = Form(...),
    technical_requirements: Optional[str] = Form(None),
    dependencies: Optional[str] = Form(None),
    admin_panel_link: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user_from_token),
    service: TaskService = Depends(get_task_service),
):
    """
    Create a new task.

    Accepts multipart/form-data. The requester is always the caller; up to
    ten files may be attached through the ``files`` field.
    """
    task_data = form_model(
        TaskCreate,
        title=title,
        type=type,
        priority=priority,
        target_completion_date=target_completion_date,
        description=description,
        business_justification=business_justification,
        acceptance_criteria=acceptance_criteria,
        assigned_to_id=assigned_to_id,
        story_points=story_points,
        technical_requirements=technical_requirements,
        dependencies=dependencies,
        admin_panel_link=admin_panel_link,
    )
    task = await service.create(task_data, current_user, _uploaded_files(files))
    return TaskResponse.model_validate(task)


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    filters: Annotated[TaskFilter, Query()],
    current_user: User = Depends(get_current_user_from_token),
    service: TaskService = Depends(get_task_service),
):
    """List tasks with optional filters. The result is not paginated."""
    return [TaskResponse.model_validate(t) for t in service.list_tasks(filters)]


@router.get("/my-tasks", response_model=List[TaskResponse])
async def list_my_tasks(
    filters: Annotated[TaskFilter, Query()],
    current_user: User = Depends(get_current_user_from_token),
    service: TaskService = Depends(get_task_service),
):
    """List tasks requested by the current user."""
    return [TaskResponse.model_validate(t) for t in service.list_my_tasks(current_user, filters)]


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard_stats(
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_user_from_token),
    service: TaskService = Depends(get_task_service),
):
    """
    Dashboard statistics.

    The date range filters on target completion date and only applies when
    both bounds are given. Recent tasks ignore the range.
    """
    return service.dashboard(from_date, to_date)


@router.get("/user-report", response_model=UserReportResponse)
async def get_user_report(
    user_id: str = Query(..., min_length=1),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_user_from_token),
    service: TaskService = Depends(get_task_service),
):
    """Historical report over the tasks assigned to one user."""
    return service.user_report(user_id, from_date, to_date)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    current_user: User = Depends(get_current_user_from_token),
    service: TaskService = Depends(get_task_service),
):
    return TaskResponse.model_validate(service.get(task_id))


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    title: Optional[str] = Form(None),
    type: Optional[TaskType] = Form(None),
    priority: Optional[TaskPriority] = Form(None),
    status: Optional[TaskStatus] = Form(None),
    target_completion_date: Optional[date] = Form(None),
    description: Optional[str] = Form(None),
    business_justification: Optional[str] = Form(None),
    technical_requirements: Optional[str] = Form(None),
    dependencies: Optional[str] = Form(None),
    acceptance_criteria: Optional[str] = Form(None),
    assigned_to_id: Optional[str] = Form(None),
    admin_panel_link: Optional[str] = Form(None),
    story_points: Optional[int] = Form(None),
    progress: Optional[int] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user_from_token),
    service: TaskService = Depends(get_task_service),
):
    """
    Partially update a task.

    Only submitted fields change. Uploaded files are appended to the existing
    attachments. Setting status ``completed`` forces progress to 100.
    """
    task_data = form_model(
        TaskUpdate,
        title=title,
        type=type,
        priority=priority,
        status=status,
        target_completion_date=target_completion_date,
        description=description,
        business_justification=business_justification,
        technical_requirements=technical_requirements,
        dependencies=dependencies,
        acceptance_criteria=acceptance_criteria,
        assigned_to_id=assigned_to_id,
        admin_panel_link=admin_panel_link,
        story_points=story_points,
        progress=progress,
    )
    task = await service.update(task_id, task_data, _uploaded_files(files))
    return TaskResponse.model_validate(task)


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    task_id: int,
    status_data: TaskStatusUpdate,
    current_user: User = Depends(get_current_user_from_token),
    service: TaskService = Depends(get_task_service),
):
    return TaskResponse.model_validate(service.update_status(task_id, status_data.status))


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: int,
    current_user: User = Depends(get_current_user_from_token),
    service: TaskService = Depends(get_task_service),
):
    """Soft delete a task."""
    service.remove(task_id)
    return MessageResponse(message="Task deleted successfully")
