"""Trash API endpoints: the global trash and per-project trash."""

from enum import Enum
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.api.dependencies import get_current_user, get_lifecycle_engine, get_trash_query_service
from src.database import get_db
from src.models.enums import EntityKind
from src.models.user import User
from src.schemas.trash import GlobalTrashResponse, LifecycleResponse, ProjectTrashResponse
from src.services.authorization import TrashScope
from src.services.errors import NotFound
from src.services.hierarchy import EntityRef, HierarchyResolver
from src.services.lifecycle import LifecycleEngine
from src.services.trash_query import TrashQueryService

router = APIRouter(prefix="/api/v1/trash", tags=["trash"])
project_router = APIRouter(prefix="/api/v1/projects/{project_id}/trash", tags=["trash"])


class TrashCollection(str, Enum):
    """Path segment naming a kind of trashed entity."""

    PROJECTS = "projects"
    LISTS = "lists"
    TASKS = "tasks"

    @property
    def kind(self) -> EntityKind:
        return {
            TrashCollection.PROJECTS: EntityKind.PROJECT,
            TrashCollection.LISTS: EntityKind.LIST,
            TrashCollection.TASKS: EntityKind.TASK,
        }[self]


def project_scoped_ref(
    db: Session, project_id: int, collection: TrashCollection, item_id: int
) -> EntityRef:
    """Build a ref for a list or task, insisting it lives in the given project."""
    ref = EntityRef(collection.kind, item_id)
    if ref.kind == EntityKind.PROJECT:
        raise NotFound("Project trash only holds lists and tasks")

    row = HierarchyResolver(db).load(ref)
    if row is None or row.project_id != project_id:
        raise NotFound(f"{ref.kind.value.capitalize()} not found")
    return ref


# ----------------------------------------------------------------------
# Global trash
# ----------------------------------------------------------------------


@router.get("", response_model=GlobalTrashResponse)
def get_trash(
    current_user: Annotated[User, Depends(get_current_user)],
    trash: Annotated[TrashQueryService, Depends(get_trash_query_service)],
):
    """Get everything in the trash of projects the current user owns."""
    return trash.global_trash(current_user)


@router.delete("", response_model=LifecycleResponse)
def empty_trash(
    current_user: Annotated[User, Depends(get_current_user)],
    engine: Annotated[LifecycleEngine, Depends(get_lifecycle_engine)],
):
    """Permanently delete all trash the current user owns."""
    result = engine.empty_trash(current_user, TrashScope.global_scope())
    return LifecycleResponse.from_result(result)


@router.patch("/{collection}/{item_id}/restore", response_model=LifecycleResponse)
def restore_item(
    collection: TrashCollection,
    item_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    engine: Annotated[LifecycleEngine, Depends(get_lifecycle_engine)],
):
    """Restore a trashed project, list or task."""
    result = engine.restore(EntityRef(collection.kind, item_id), current_user)
    return LifecycleResponse.from_result(result)


@router.delete("/{collection}/{item_id}", response_model=LifecycleResponse)
def force_delete_item(
    collection: TrashCollection,
    item_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    engine: Annotated[LifecycleEngine, Depends(get_lifecycle_engine)],
):
    """Permanently delete a trashed project, list or task."""
    result = engine.force_delete(EntityRef(collection.kind, item_id), current_user)
    return LifecycleResponse.from_result(result)


# ----------------------------------------------------------------------
# Project trash
# ----------------------------------------------------------------------


@project_router.get("", response_model=ProjectTrashResponse)
def get_project_trash(
    project_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    trash: Annotated[TrashQueryService, Depends(get_trash_query_service)],
):
    """Get trashed lists and tasks of a project (any member)."""
    return trash.project_trash(project_id, current_user)


@project_router.delete("", response_model=LifecycleResponse)
def empty_project_trash(
    project_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    engine: Annotated[LifecycleEngine, Depends(get_lifecycle_engine)],
):
    """Permanently delete all trashed lists and tasks of a project (owner only)."""
    result = engine.empty_trash(current_user, TrashScope.for_project(project_id))
    return LifecycleResponse.from_result(result)


@project_router.patch("/{collection}/{item_id}/restore", response_model=LifecycleResponse)
def restore_project_item(
    project_id: int,
    collection: TrashCollection,
    item_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    engine: Annotated[LifecycleEngine, Depends(get_lifecycle_engine)],
):
    """Restore a trashed list or task of the project."""
    ref = project_scoped_ref(db, project_id, collection, item_id)
    return LifecycleResponse.from_result(engine.restore(ref, current_user))


@project_router.delete("/{collection}/{item_id}", response_model=LifecycleResponse)
def force_delete_project_item(
    project_id: int,
    collection: TrashCollection,
    item_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    engine: Annotated[LifecycleEngine, Depends(get_lifecycle_engine)],
):
    """Permanently delete a trashed list or task of the project."""
    ref = project_scoped_ref(db, project_id, collection, item_id)
    return LifecycleResponse.from_result(engine.force_delete(ref, current_user))
