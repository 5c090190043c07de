"""Authorization policy consumed by the lifecycle engine."""

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.orm import Session

from src.models.enums import EntityKind, ProjectRole
from src.models.project import Project, ProjectMember
from src.models.user import User


@dataclass(frozen=True)
class TrashScope:
    """Boundary of an empty-trash request: all of a user's trash, or one project."""

    project_id: int | None = None

    @classmethod
    def global_scope(cls) -> "TrashScope":
        return cls()

    @classmethod
    def for_project(cls, project_id: int) -> "TrashScope":
        return cls(project_id=project_id)

    @property
    def is_global(self) -> bool:
        return self.project_id is None


class AuthorizationPolicy(Protocol):
    """Answers "may this actor do X" questions.

    `kind` is the kind of entity acted on and `project` is the project that
    owns it (the entity itself when kind is PROJECT).
    """

    def can_view(self, db: Session, actor: User, project: Project) -> bool: ...

    def can_delete(self, db: Session, actor: User, kind: EntityKind, project: Project) -> bool: ...

    def can_restore(self, db: Session, actor: User, kind: EntityKind, project: Project) -> bool: ...

    def can_force_delete(
        self, db: Session, actor: User, kind: EntityKind, project: Project
    ) -> bool: ...

    def can_empty_trash(
        self, db: Session, actor: User, scope: TrashScope, project: Project | None
    ) -> bool: ...


def get_member_role(db: Session, user: User, project: Project) -> ProjectRole | None:
    """Get the role of a user in the project, or None if not a member."""
    if project.owner_id == user.id:
        return ProjectRole.OWNER

    member = (
        db.query(ProjectMember)
        .filter(ProjectMember.project_id == project.id, ProjectMember.user_id == user.id)
        .first()
    )
    return member.role if member else None


class ProjectRolePolicy:
    """Default policy based on project ownership and member roles.

    Members of any role can view. Only the Owner role may trash or restore
    content, and only the project owner may purge it.
    """

    def can_view(self, db: Session, actor: User, project: Project) -> bool:
        return get_member_role(db, actor, project) is not None

    def can_delete(self, db: Session, actor: User, kind: EntityKind, project: Project) -> bool:
        if kind == EntityKind.PROJECT:
            return project.owner_id == actor.id
        role = get_member_role(db, actor, project)
        return role is not None and role.can_delete()

    def can_restore(self, db: Session, actor: User, kind: EntityKind, project: Project) -> bool:
        return self.can_delete(db, actor, kind, project)

    def can_force_delete(
        self, db: Session, actor: User, kind: EntityKind, project: Project
    ) -> bool:
        return project.owner_id == actor.id

    def can_empty_trash(
        self, db: Session, actor: User, scope: TrashScope, project: Project | None
    ) -> bool:
        # Global scope is bounded by ownership in the query itself
        if scope.is_global:
            return True
        return project is not None and project.owner_id == actor.id
