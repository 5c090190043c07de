"""SQLAlchemy models."""

from src.models.project import Project, ProjectMember
from src.models.task import Task
from src.models.task_list import TaskList
from src.models.user import User

__all__ = [
    "User",
    "Project",
    "ProjectMember",
    "TaskList",
    "Task",
]
