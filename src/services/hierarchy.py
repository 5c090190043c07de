"""Hierarchy resolution for projects, task lists and tasks.

Entities are addressed by (kind, id) and every lookup here runs in
including-trashed mode: cascade operations need to see rows whatever
their current marker is. Nothing in this module writes to the session.
"""

from dataclasses import dataclass, field

from sqlalchemy.orm import Query, Session

from src.models.enums import EntityKind
from src.models.project import Project
from src.models.task import Task
from src.models.task_list import TaskList

MODEL_BY_KIND = {
    EntityKind.PROJECT: Project,
    EntityKind.LIST: TaskList,
    EntityKind.TASK: Task,
}

HierarchyRow = Project | TaskList | Task


@dataclass(frozen=True)
class EntityRef:
    """Stable reference to a hierarchy entity."""

    kind: EntityKind
    id: int

    @classmethod
    def of(cls, row: HierarchyRow) -> "EntityRef":
        return cls(kind_of(row), row.id)

    def __str__(self) -> str:
        return f"{self.kind.value} {self.id}"


def kind_of(row: HierarchyRow) -> EntityKind:
    """Get the EntityKind for a model instance."""
    for kind, model in MODEL_BY_KIND.items():
        if isinstance(row, model):
            return kind
    raise TypeError(f"Not a hierarchy entity: {row!r}")


@dataclass
class Subtree:
    """An entity plus every list and task below it, trashed or not."""

    root: HierarchyRow
    lists: list[TaskList] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)

    @property
    def root_ref(self) -> EntityRef:
        return EntityRef.of(self.root)

    @property
    def descendants(self) -> list[TaskList | Task]:
        """Lists then tasks, excluding the root."""
        return [row for row in self.rows() if row is not self.root]

    def rows(self) -> list[HierarchyRow]:
        """Root first, then lists, then tasks."""
        ordered: list[HierarchyRow] = [self.root]
        ordered.extend(lst for lst in self.lists if lst is not self.root)
        ordered.extend(task for task in self.tasks if task is not self.root)
        return ordered

    def refs(self) -> list[EntityRef]:
        return [EntityRef.of(row) for row in self.rows()]


class HierarchyResolver:
    """Read-only ancestor/descendant lookups over the entity tables."""

    def __init__(self, db: Session):
        self.db = db

    def load(self, ref: EntityRef, for_update: bool = False) -> HierarchyRow | None:
        """Fetch one entity, including trashed rows."""
        model = MODEL_BY_KIND[ref.kind]
        query: Query = self.db.query(model).filter(model.id == ref.id)
        if for_update:
            query = query.with_for_update().populate_existing()
        return query.first()

    def project_of(self, row: HierarchyRow, for_update: bool = False) -> Project | None:
        """Get the project that owns an entity (the entity itself for projects)."""
        if isinstance(row, Project) and not for_update:
            return row
        project_id = row.id if isinstance(row, Project) else row.project_id
        return self.load(EntityRef(EntityKind.PROJECT, project_id), for_update=for_update)

    def parent_of(self, row: HierarchyRow) -> Project | TaskList | None:
        """Get the direct parent: the list of a task, the project of a list."""
        if isinstance(row, Task):
            return self.db.query(TaskList).filter(TaskList.id == row.list_id).first()
        if isinstance(row, TaskList):
            return self.project_of(row)
        return None

    def ancestors_of(self, row: HierarchyRow) -> list[Project | TaskList]:
        """Nearest ancestor first."""
        ancestors: list[Project | TaskList] = []
        parent = self.parent_of(row)
        while parent is not None:
            ancestors.append(parent)
            parent = self.parent_of(parent)
        return ancestors

    def trashed_ancestor(self, row: HierarchyRow) -> Project | TaskList | None:
        """Get the nearest ancestor carrying the trash marker, if any."""
        for ancestor in self.ancestors_of(row):
            if ancestor.is_deleted:
                return ancestor
        return None

    def has_trashed_ancestor(self, row: HierarchyRow) -> bool:
        """Check ancestors only; the entity's own marker is ignored."""
        return self.trashed_ancestor(row) is not None

    def descendants_of(self, row: HierarchyRow) -> Subtree:
        """Collect the entity and everything below it."""
        if isinstance(row, Project):
            lists = (
                self.db.query(TaskList)
                .filter(TaskList.project_id == row.id)
                .order_by(TaskList.position, TaskList.id)
                .all()
            )
            tasks = self._tasks_under([lst.id for lst in lists])
            return Subtree(root=row, lists=lists, tasks=tasks)

        if isinstance(row, TaskList):
            return Subtree(root=row, lists=[row], tasks=self._tasks_under([row.id]))

        return Subtree(root=row, tasks=[row])

    def _tasks_under(self, list_ids: list[int]) -> list[Task]:
        if not list_ids:
            return []
        return (
            self.db.query(Task)
            .filter(Task.list_id.in_(list_ids))
            .order_by(Task.list_id, Task.position, Task.id)
            .all()
        )
