"""Soft-delete, restore and purge of projects, task lists and tasks.

Each public operation runs as a single transaction on the engine's session:
all checks happen first, then every affected row changes together, then the
session commits. Any exception rolls the whole operation back. Events are
published only after a successful commit.
"""

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from src.models.enums import EntityKind
from src.models.project import Project, ProjectMember
from src.models.task import Task
from src.models.task_list import TaskList
from src.models.user import User
from src.services.authorization import AuthorizationPolicy, ProjectRolePolicy, TrashScope
from src.services.errors import Forbidden, InvalidState, NotFound, PreconditionFailed
from src.services.hierarchy import EntityRef, HierarchyResolver, HierarchyRow, Subtree
from src.services.realtime import Notifier, ProjectEventType, RealtimeNotifier
from src.services.retention import (
    FixedRetentionPolicy,
    PlanRetentionPolicy,
    RetentionPolicy,
    as_utc,
)

logger = logging.getLogger(__name__)

# Max ids per DELETE ... WHERE id IN (...) statement
PURGE_CHUNK_SIZE = 500


@dataclass
class LifecycleResult:
    """Outcome of a lifecycle operation."""

    operation: str
    entity: EntityRef | None
    affected_refs: list[EntityRef] = field(default_factory=list)

    @property
    def affected(self) -> int:
        return len(self.affected_refs)

    def count_by_kind(self) -> dict[str, int]:
        counts = {kind.value: 0 for kind in EntityKind}
        for ref in self.affected_refs:
            counts[ref.kind.value] += 1
        return counts


@dataclass
class _PurgeSet:
    """Ids to delete, collected from one or more subtrees."""

    project_ids: set[int] = field(default_factory=set)
    list_ids: set[int] = field(default_factory=set)
    task_ids: set[int] = field(default_factory=set)
    project_by_ref: dict[EntityRef, int] = field(default_factory=dict)

    def add(self, subtree: Subtree) -> None:
        for row in subtree.rows():
            ref = EntityRef.of(row)
            if ref.kind == EntityKind.PROJECT:
                self.project_ids.add(row.id)
                self.project_by_ref[ref] = row.id
            elif ref.kind == EntityKind.LIST:
                self.list_ids.add(row.id)
                self.project_by_ref[ref] = row.project_id
            else:
                self.task_ids.add(row.id)
                self.project_by_ref[ref] = row.project_id

    def refs(self) -> list[EntityRef]:
        # Outermost first so callers see projects, then lists, then tasks
        return sorted(self.project_by_ref, key=lambda ref: (ref.kind.depth, ref.id))

    @property
    def affected_project_ids(self) -> set[int]:
        return set(self.project_by_ref.values())


def _chunks(ids: Iterable[int], size: int = PURGE_CHUNK_SIZE) -> Iterator[list[int]]:
    batch: list[int] = []
    for entity_id in sorted(ids):
        batch.append(entity_id)
        if len(batch) >= size:
            yield batch
            batch = []
    if batch:
        yield batch


def _describe(row: HierarchyRow) -> str:
    label = row.title if isinstance(row, Task) else row.name
    return f"{EntityRef.of(row).kind.value} '{label}'"


class LifecycleEngine:
    """Trash lifecycle operations over the project hierarchy."""

    def __init__(
        self,
        db: Session,
        authorization: AuthorizationPolicy | None = None,
        notifier: Notifier | None = None,
        retention: RetentionPolicy | None = None,
    ):
        self.db = db
        self.authorization = authorization or ProjectRolePolicy()
        self.notifier = notifier or RealtimeNotifier()
        self.retention = retention or PlanRetentionPolicy()
        self.hierarchy = HierarchyResolver(db)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def soft_delete(self, ref: EntityRef, actor: User) -> LifecycleResult:
        """Move an entity and its whole subtree to the trash.

        Rows already in the trash keep their marker and origin, so repeating
        the call is a no-op that reports zero newly trashed rows.
        """
        with self._transaction():
            row, project = self._resolve(ref, actor, for_update=True)
            if not self.authorization.can_delete(self.db, actor, ref.kind, project):
                logger.warning(f"User {actor.id} denied delete of {ref}")
                raise Forbidden(f"You don't have permission to delete this {ref.kind.value}")

            now = datetime.now(UTC)
            subtree = self.hierarchy.descendants_of(row)
            trashed: list[EntityRef] = []

            if not row.is_deleted:
                row.soft_delete(now)
                trashed.append(ref)

            for descendant in subtree.descendants:
                if not descendant.is_deleted:
                    descendant.cascade_delete(now, ref.kind, ref.id)
                    trashed.append(EntityRef.of(descendant))

            project_id = project.id

        result = LifecycleResult("soft_delete", ref, trashed)
        logger.info(f"User {actor.id} trashed {ref}: {result.affected} rows newly trashed")
        if result.affected:
            self._notify(ProjectEventType.ENTITY_TRASHED, ref, actor, project_id, result)
        return result

    def restore(self, ref: EntityRef, actor: User) -> LifecycleResult:
        """Bring a trashed entity back, together with what its deletion swept along.

        Descendants trashed independently, or by some other ancestor, stay in
        the trash. Restoring is refused while any ancestor is still trashed.
        """
        with self._transaction():
            row, project = self._resolve(ref, actor, for_update=True)
            if not self.authorization.can_restore(self.db, actor, ref.kind, project):
                logger.warning(f"User {actor.id} denied restore of {ref}")
                raise Forbidden(f"You don't have permission to restore this {ref.kind.value}")

            if not row.is_deleted:
                raise InvalidState(f"Cannot restore {ref}: it is not in the trash")

            blocker = self.hierarchy.trashed_ancestor(row)
            if blocker is not None:
                blocker_kind = EntityRef.of(blocker).kind.value
                raise PreconditionFailed(
                    f"Cannot restore {ref}: its {_describe(blocker)} is in the trash; "
                    f"restore the {blocker_kind} first"
                )

            if isinstance(row, TaskList):
                clash = self._active_list_named(row.project_id, row.name)
                if clash is not None:
                    raise PreconditionFailed(
                        f"Cannot restore {ref}: {_describe(clash)} already exists in this "
                        f"project; rename or trash it first"
                    )

            subtree = self.hierarchy.descendants_of(row)
            row.restore()
            restored = [ref]

            for descendant in subtree.descendants:
                if descendant.was_cascaded_from(ref.kind, ref.id):
                    descendant.restore()
                    restored.append(EntityRef.of(descendant))

            project_id = project.id

        result = LifecycleResult("restore", ref, restored)
        logger.info(f"User {actor.id} restored {ref}: {result.affected} rows reactivated")
        self._notify(ProjectEventType.ENTITY_RESTORED, ref, actor, project_id, result)
        return result

    def force_delete(self, ref: EntityRef, actor: User) -> LifecycleResult:
        """Permanently remove a trashed entity and everything below it."""
        with self._transaction():
            row, project = self._resolve(ref, actor, for_update=True)
            if not self.authorization.can_force_delete(self.db, actor, ref.kind, project):
                logger.warning(f"User {actor.id} denied permanent delete of {ref}")
                raise Forbidden(
                    f"You don't have permission to permanently delete this {ref.kind.value}"
                )

            if not row.is_deleted:
                raise InvalidState(f"Cannot permanently delete {ref}: move it to the trash first")

            purge = _PurgeSet()
            purge.add(self.hierarchy.descendants_of(row))
            project_id = project.id
            self._purge(purge)

        result = LifecycleResult("force_delete", ref, purge.refs())
        logger.info(f"User {actor.id} permanently deleted {ref}: {result.affected} rows removed")
        self._notify(ProjectEventType.ENTITY_PURGED, ref, actor, project_id, result)
        return result

    def empty_trash(self, actor: User, scope: TrashScope) -> LifecycleResult:
        """Permanently remove every trashed entity the actor owns within scope.

        Scope is always ownership: trash in projects where the actor is only
        a member is never touched.
        """
        with self._transaction():
            if scope.is_global:
                if not self.authorization.can_empty_trash(self.db, actor, scope, None):
                    raise Forbidden("You don't have permission to empty the trash")
                purge = self._collect_owned_trash(actor)
            else:
                project = self._resolve_project(scope.project_id, actor, for_update=True)
                if not self.authorization.can_empty_trash(self.db, actor, scope, project):
                    logger.warning(f"User {actor.id} denied emptying trash of project {project.id}")
                    raise Forbidden("Only the project owner can empty the project trash")
                purge = self._collect_project_trash(project)

            self._purge(purge)

        result = LifecycleResult("empty_trash", None, purge.refs())
        scope_label = "all projects" if scope.is_global else f"project {scope.project_id}"
        logger.info(
            f"User {actor.id} emptied trash of {scope_label}: {result.affected} rows removed"
        )
        for project_id in sorted(purge.affected_project_ids):
            self._notify(ProjectEventType.TRASH_EMPTIED, None, actor, project_id, result)
        return result

    def purge_expired(
        self,
        now: datetime | None = None,
        retention_days: int | None = None,
        dry_run: bool = False,
    ) -> LifecycleResult:
        """Permanently remove trash whose retention window has elapsed.

        This is a system operation with no actor. `retention_days` overrides
        the per-owner retention policy. With `dry_run` the affected rows are
        reported but nothing is deleted.
        """
        now = as_utc(now or datetime.now(UTC))
        retention = (
            FixedRetentionPolicy(retention_days) if retention_days is not None else self.retention
        )

        with self._transaction():
            self._lock_projects(self._projects_with_trash())
            purge = _PurgeSet()
            for row, owner in self._trashed_rows_with_owner():
                if as_utc(row.deleted_at) + retention.retention_window(owner) <= now:
                    purge.add(self.hierarchy.descendants_of(row))

            if dry_run:
                self.db.rollback()
            else:
                self._purge(purge)

        result = LifecycleResult("purge_expired", None, purge.refs())
        verb = "would remove" if dry_run else "removed"
        logger.info(f"Expired trash purge {verb} {result.affected} rows")
        if not dry_run:
            for project_id in sorted(purge.affected_project_ids):
                self._notify(ProjectEventType.ENTITY_PURGED, None, None, project_id, result)
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def _resolve(
        self, ref: EntityRef, actor: User, for_update: bool = False
    ) -> tuple[HierarchyRow, Project]:
        """Load an entity and its project, hiding anything the actor cannot see.

        With `for_update` the owning project row is locked first, then the
        entity itself, so every lifecycle change inside one project
        serializes on the same row.
        """
        not_found = NotFound(f"{ref.kind.value.capitalize()} not found")

        row = self.hierarchy.load(ref)
        if row is None:
            raise not_found

        project = self.hierarchy.project_of(row, for_update=for_update)
        if project is None or not self.authorization.can_view(self.db, actor, project):
            raise not_found

        if for_update and row is not project:
            # Re-read under the project lock; a concurrent purge may have removed it
            row = self.hierarchy.load(ref, for_update=True)
            if row is None:
                raise not_found

        return row, project

    def _lock_projects(self, project_ids: Iterable[int]) -> None:
        """Lock project rows in id order, the same order every caller uses."""
        ids = sorted(set(project_ids))
        for batch in _chunks(ids):
            self.db.query(Project.id).filter(Project.id.in_(batch)).order_by(
                Project.id
            ).with_for_update().all()

    def _resolve_project(self, project_id: int, actor: User, for_update: bool = False) -> Project:
        _, project = self._resolve(
            EntityRef(EntityKind.PROJECT, project_id), actor, for_update=for_update
        )
        return project

    def _collect_owned_trash(self, actor: User) -> _PurgeSet:
        owned_project_ids = select(Project.id).where(Project.owner_id == actor.id)
        self._lock_projects(
            project_id
            for (project_id,) in self.db.query(Project.id).filter(Project.owner_id == actor.id)
        )

        roots: list[HierarchyRow] = []
        roots.extend(
            self.db.query(Project)
            .filter(Project.owner_id == actor.id, Project.deleted_at.is_not(None))
            .all()
        )
        roots.extend(
            self.db.query(TaskList)
            .filter(TaskList.project_id.in_(owned_project_ids), TaskList.deleted_at.is_not(None))
            .all()
        )
        roots.extend(
            self.db.query(Task)
            .filter(Task.project_id.in_(owned_project_ids), Task.deleted_at.is_not(None))
            .all()
        )
        return self._purge_set_for(roots)

    def _collect_project_trash(self, project: Project) -> _PurgeSet:
        roots: list[HierarchyRow] = []
        roots.extend(
            self.db.query(TaskList)
            .filter(TaskList.project_id == project.id, TaskList.deleted_at.is_not(None))
            .all()
        )
        roots.extend(
            self.db.query(Task)
            .filter(Task.project_id == project.id, Task.deleted_at.is_not(None))
            .all()
        )
        return self._purge_set_for(roots)

    def _purge_set_for(self, roots: Iterable[HierarchyRow]) -> _PurgeSet:
        purge = _PurgeSet()
        for row in roots:
            if EntityRef.of(row) in purge.project_by_ref:
                continue
            purge.add(self.hierarchy.descendants_of(row))
        return purge

    def _active_list_named(self, project_id: int, name: str) -> TaskList | None:
        """Active list names are unique per project, compared case-insensitively."""
        return (
            self.db.query(TaskList)
            .filter(
                TaskList.project_id == project_id,
                TaskList.deleted_at.is_(None),
                func.lower(TaskList.name) == name.strip().lower(),
            )
            .first()
        )

    def _projects_with_trash(self) -> set[int]:
        project_ids = {
            project_id
            for (project_id,) in self.db.query(Project.id).filter(Project.deleted_at.is_not(None))
        }
        for model in (TaskList, Task):
            project_ids.update(
                project_id
                for (project_id,) in self.db.query(model.project_id)
                .filter(model.deleted_at.is_not(None))
                .distinct()
            )
        return project_ids

    def _trashed_rows_with_owner(self) -> Iterator[tuple[HierarchyRow, User]]:
        yield from (
            self.db.query(Project, User)
            .join(User, Project.owner_id == User.id)
            .filter(Project.deleted_at.is_not(None))
            .all()
        )
        for model in (TaskList, Task):
            yield from (
                self.db.query(model, User)
                .join(Project, model.project_id == Project.id)
                .join(User, Project.owner_id == User.id)
                .filter(model.deleted_at.is_not(None))
                .all()
            )

    def _purge(self, purge: _PurgeSet) -> None:
        """Delete deepest level first so no foreign key is left dangling."""
        for ids in _chunks(purge.task_ids):
            self.db.query(Task).filter(Task.id.in_(ids)).delete(synchronize_session="fetch")
        for ids in _chunks(purge.list_ids):
            self.db.query(TaskList).filter(TaskList.id.in_(ids)).delete(
                synchronize_session="fetch"
            )
        for ids in _chunks(purge.project_ids):
            self.db.query(ProjectMember).filter(ProjectMember.project_id.in_(ids)).delete(
                synchronize_session="fetch"
            )
            self.db.query(Project).filter(Project.id.in_(ids)).delete(synchronize_session="fetch")

    def _notify(
        self,
        event: ProjectEventType,
        ref: EntityRef | None,
        actor: User | None,
        project_id: int,
        result: LifecycleResult,
    ) -> None:
        try:
            self.notifier.notify(
                event,
                ref,
                actor,
                project_id=project_id,
                data={"operation": result.operation, "counts": result.count_by_kind()},
            )
        except Exception as e:
            # Notifier failures never undo a committed lifecycle change
            logger.error(f"Lifecycle notifier failed for {event}: {e}")
