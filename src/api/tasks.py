"""Task API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.api.dependencies import get_current_user, get_lifecycle_engine
from src.api.projects import get_member_project
from src.api.task_lists import get_member_list
from src.database import get_db
from src.models.enums import EntityKind
from src.models.task import Task
from src.models.user import User
from src.schemas.task import TaskCreate, TaskResponse
from src.schemas.trash import LifecycleResponse
from src.services.hierarchy import EntityRef
from src.services.lifecycle import LifecycleEngine

router = APIRouter(prefix="/api/v1", tags=["tasks"])


@router.get("/lists/{list_id}/tasks", response_model=list[TaskResponse])
def get_tasks(
    list_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get all active tasks of a list."""
    get_member_list(db, list_id, current_user)
    return (
        db.query(Task)
        .filter(Task.list_id == list_id, Task.deleted_at.is_(None))
        .order_by(Task.position, Task.id)
        .all()
    )


@router.post(
    "/lists/{list_id}/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED
)
def create_task(
    list_id: int,
    task_data: TaskCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a task in a list."""
    task_list = get_member_list(db, list_id, current_user)
    _, role = get_member_project(db, task_list.project_id, current_user)
    if not role.can_edit():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to add tasks to this project",
        )

    task = Task(
        list_id=task_list.id,
        project_id=task_list.project_id,
        title=task_data.title,
        description=task_data.description,
        priority=task_data.priority,
        due_date=task_data.due_date,
        assignee_id=task_data.assignee_id,
        position=task_data.position,
        created_by=current_user.id,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@router.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a specific active task."""
    task = db.query(Task).filter(Task.id == task_id, Task.deleted_at.is_(None)).first()
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    get_member_project(db, task.project_id, current_user)
    return task


@router.delete("/tasks/{task_id}", response_model=LifecycleResponse)
def delete_task(
    task_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    engine: Annotated[LifecycleEngine, Depends(get_lifecycle_engine)],
):
    """Move a task to the trash."""
    result = engine.soft_delete(EntityRef(EntityKind.TASK, task_id), current_user)
    return LifecycleResponse.from_result(result)
