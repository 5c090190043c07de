"""Project API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from src.api.dependencies import get_current_user, get_lifecycle_engine
from src.database import get_db
from src.models.enums import EntityKind, ProjectRole
from src.models.project import Project, ProjectMember
from src.models.user import User
from src.schemas.project import (
    ProjectCreate,
    ProjectMemberCreate,
    ProjectMemberResponse,
    ProjectResponse,
)
from src.schemas.trash import LifecycleResponse
from src.services.auth import get_user_by_email
from src.services.authorization import get_member_role
from src.services.hierarchy import EntityRef
from src.services.lifecycle import LifecycleEngine

router = APIRouter(prefix="/api/v1/projects", tags=["projects"])


def get_member_project(db: Session, project_id: int, user: User) -> tuple[Project, ProjectRole]:
    """Get an active project the user owns or is a member of, with their role."""
    project = (
        db.query(Project).filter(Project.id == project_id, Project.deleted_at.is_(None)).first()
    )
    role = get_member_role(db, user, project) if project else None
    if project is None or role is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project, role


@router.get("", response_model=list[ProjectResponse])
def get_projects(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get all active projects owned by or shared with the current user."""
    member_project_ids = db.query(ProjectMember.project_id).filter(
        ProjectMember.user_id == current_user.id
    )
    return (
        db.query(Project)
        .filter(
            Project.deleted_at.is_(None),
            or_(Project.owner_id == current_user.id, Project.id.in_(member_project_ids)),
        )
        .order_by(Project.id)
        .all()
    )


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    project_data: ProjectCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a new project owned by the current user."""
    project = Project(
        owner_id=current_user.id,
        name=project_data.name,
        description=project_data.description,
        color=project_data.color,
        icon=project_data.icon,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a specific project."""
    project, _ = get_member_project(db, project_id, current_user)
    return project


@router.delete("/{project_id}", response_model=LifecycleResponse)
def delete_project(
    project_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    engine: Annotated[LifecycleEngine, Depends(get_lifecycle_engine)],
):
    """Move a project and everything in it to the trash (owner only)."""
    result = engine.soft_delete(EntityRef(EntityKind.PROJECT, project_id), current_user)
    return LifecycleResponse.from_result(result)


@router.post(
    "/{project_id}/members",
    response_model=ProjectMemberResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_member(
    project_id: int,
    member_data: ProjectMemberCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Add a user to a project (owner only)."""
    project, role = get_member_project(db, project_id, current_user)
    if role != ProjectRole.OWNER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the owner can manage members",
        )
    if member_data.role == ProjectRole.OWNER:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A project has exactly one owner",
        )

    user = get_user_by_email(db, member_data.user_email)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if get_member_role(db, user, project) is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is already a member of this project",
        )

    member = ProjectMember(project_id=project.id, user_id=user.id, role=member_data.role)
    db.add(member)
    db.commit()
    db.refresh(member)
    return member
