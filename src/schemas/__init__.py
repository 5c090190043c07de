"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import AuthResponse, UserLogin, UserRegister, UserResponse
from src.schemas.project import (
    ProjectCreate,
    ProjectMemberCreate,
    ProjectMemberResponse,
    ProjectResponse,
)
from src.schemas.task import TaskCreate, TaskResponse
from src.schemas.task_list import TaskListCreate, TaskListResponse
from src.schemas.trash import (
    GlobalTrashResponse,
    LifecycleResponse,
    ProjectTrashResponse,
    TrashItem,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "AuthResponse",
    "UserResponse",
    "ProjectCreate",
    "ProjectResponse",
    "ProjectMemberCreate",
    "ProjectMemberResponse",
    "TaskListCreate",
    "TaskListResponse",
    "TaskCreate",
    "TaskResponse",
    "TrashItem",
    "GlobalTrashResponse",
    "ProjectTrashResponse",
    "LifecycleResponse",
]
