"""
Database models package.
"""
from .user import User, UserRole, UserStatus, Department, Gender
from .task import Task, TaskType, TaskStatus, TaskPriority
from .counter import IdCounter

__all__ = [
    "User",
    "UserRole",
    "UserStatus",
    "Department",
    "Gender",
    "Task",
    "TaskType",
    "TaskStatus",
    "TaskPriority",
    "IdCounter",
]
