"""Trash view and lifecycle result schemas."""

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from src.models.enums import EntityKind, TrashState

if TYPE_CHECKING:
    from src.services.lifecycle import LifecycleResult


class EntitySummary(BaseModel):
    """Short reference to a parent entity."""

    id: int
    name: str
    color: str | None = None


class TrashOrigin(BaseModel):
    """Ancestor whose deletion swept an entity into the trash."""

    kind: EntityKind
    id: int


class TrashItem(BaseModel):
    """A trashed project, list or task with its retention deadline."""

    kind: EntityKind
    id: int
    name: str
    project: EntitySummary | None = None
    list: EntitySummary | None = None
    deleted_at: datetime
    expires_at: datetime
    trash_state: TrashState
    trashed_via: TrashOrigin | None = None
    lists_count: int | None = None
    tasks_count: int | None = None


class GlobalTrashResponse(BaseModel):
    """Everything in the trash of projects a user owns."""

    projects: list[TrashItem] = Field(default_factory=list)
    lists: list[TrashItem] = Field(default_factory=list)
    tasks: list[TrashItem] = Field(default_factory=list)
    retention_days: int


class ProjectTrashResponse(BaseModel):
    """Trashed lists and tasks of one project."""

    lists: list[TrashItem] = Field(default_factory=list)
    tasks: list[TrashItem] = Field(default_factory=list)
    retention_days: int


class LifecycleResponse(BaseModel):
    """Result of a soft-delete, restore, purge or empty-trash call."""

    operation: str
    kind: EntityKind | None = None
    id: int | None = None
    affected: int
    counts: dict[str, int]

    @classmethod
    def from_result(cls, result: "LifecycleResult") -> "LifecycleResponse":
        return cls(
            operation=result.operation,
            kind=result.entity.kind if result.entity else None,
            id=result.entity.id if result.entity else None,
            affected=result.affected,
            counts=result.count_by_kind(),
        )
