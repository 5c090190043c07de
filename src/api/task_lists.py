"""Task list API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from src.api.dependencies import get_current_user, get_lifecycle_engine
from src.api.projects import get_member_project
from src.database import get_db
from src.models.enums import EntityKind
from src.models.task_list import TaskList
from src.models.user import User
from src.schemas.task_list import TaskListCreate, TaskListResponse
from src.schemas.trash import LifecycleResponse
from src.services.hierarchy import EntityRef
from src.services.lifecycle import LifecycleEngine

router = APIRouter(prefix="/api/v1", tags=["task_lists"])


def get_member_list(db: Session, list_id: int, user: User) -> TaskList:
    """Get an active list in a project the user can access."""
    task_list = (
        db.query(TaskList).filter(TaskList.id == list_id, TaskList.deleted_at.is_(None)).first()
    )
    if not task_list:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="List not found")

    get_member_project(db, task_list.project_id, user)
    return task_list


@router.get("/projects/{project_id}/lists", response_model=list[TaskListResponse])
def get_lists(
    project_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get all active lists of a project."""
    get_member_project(db, project_id, current_user)
    return (
        db.query(TaskList)
        .filter(TaskList.project_id == project_id, TaskList.deleted_at.is_(None))
        .order_by(TaskList.position, TaskList.id)
        .all()
    )


@router.post(
    "/projects/{project_id}/lists",
    response_model=TaskListResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_list(
    project_id: int,
    list_data: TaskListCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a list; names are unique among the project's active lists."""
    _, role = get_member_project(db, project_id, current_user)
    if not role.can_edit():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to add lists to this project",
        )

    duplicate = (
        db.query(TaskList)
        .filter(
            TaskList.project_id == project_id,
            TaskList.deleted_at.is_(None),
            func.lower(TaskList.name) == list_data.name.strip().lower(),
        )
        .first()
    )
    if duplicate:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A list with this name already exists in the project",
        )

    position = list_data.position
    if position is None:
        max_position = (
            db.query(func.max(TaskList.position))
            .filter(TaskList.project_id == project_id)
            .scalar()
        )
        position = (max_position or 0) + 1

    task_list = TaskList(project_id=project_id, name=list_data.name.strip(), position=position)
    db.add(task_list)
    db.commit()
    db.refresh(task_list)
    return task_list


@router.delete("/lists/{list_id}", response_model=LifecycleResponse)
def delete_list(
    list_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    engine: Annotated[LifecycleEngine, Depends(get_lifecycle_engine)],
):
    """Move a list and its tasks to the trash."""
    result = engine.soft_delete(EntityRef(EntityKind.LIST, list_id), current_user)
    return LifecycleResponse.from_result(result)
