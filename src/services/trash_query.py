"""Read-only trash views."""

from datetime import timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from src.models.enums import EntityKind
from src.models.project import Project
from src.models.task import Task
from src.models.task_list import TaskList
from src.models.user import User
from src.schemas.trash import (
    EntitySummary,
    GlobalTrashResponse,
    ProjectTrashResponse,
    TrashItem,
    TrashOrigin,
)
from src.services.authorization import AuthorizationPolicy, ProjectRolePolicy
from src.services.errors import NotFound
from src.services.retention import PlanRetentionPolicy, RetentionPolicy, as_utc


def _origin(row: Project | TaskList | Task) -> TrashOrigin | None:
    if row.trashed_via_kind is None or row.trashed_via_id is None:
        return None
    return TrashOrigin(kind=row.trashed_via_kind, id=row.trashed_via_id)


class TrashQueryService:
    """Lists trashed entities, each annotated with its retention deadline.

    Every call reads straight from the database, so results reflect the
    latest committed lifecycle change.
    """

    def __init__(
        self,
        db: Session,
        authorization: AuthorizationPolicy | None = None,
        retention: RetentionPolicy | None = None,
    ):
        self.db = db
        self.authorization = authorization or ProjectRolePolicy()
        self.retention = retention or PlanRetentionPolicy()

    def global_trash(self, user: User) -> GlobalTrashResponse:
        """Get the trash of every project the user owns.

        Projects the user is merely a member of are not included.
        """
        window = self.retention.retention_window(user)

        projects = (
            self.db.query(Project)
            .filter(Project.owner_id == user.id, Project.deleted_at.is_not(None))
            .order_by(Project.deleted_at.desc(), Project.id.desc())
            .all()
        )
        list_counts = self._list_counts_by_project([p.id for p in projects])
        task_counts = self._task_counts(Task.project_id, [p.id for p in projects])

        lists = (
            self.db.query(TaskList, Project)
            .join(Project, TaskList.project_id == Project.id)
            .filter(Project.owner_id == user.id, TaskList.deleted_at.is_not(None))
            .order_by(TaskList.deleted_at.desc(), TaskList.id.desc())
            .all()
        )
        tasks_per_list = self._task_counts(Task.list_id, [lst.id for lst, _ in lists])

        tasks = (
            self.db.query(Task, TaskList, Project)
            .join(TaskList, Task.list_id == TaskList.id)
            .join(Project, Task.project_id == Project.id)
            .filter(Project.owner_id == user.id, Task.deleted_at.is_not(None))
            .order_by(Task.deleted_at.desc(), Task.id.desc())
            .all()
        )

        return GlobalTrashResponse(
            projects=[
                TrashItem(
                    kind=EntityKind.PROJECT,
                    id=project.id,
                    name=project.name,
                    deleted_at=as_utc(project.deleted_at),
                    expires_at=as_utc(project.deleted_at) + window,
                    trash_state=project.trash_state,
                    trashed_via=_origin(project),
                    lists_count=list_counts.get(project.id, 0),
                    tasks_count=task_counts.get(project.id, 0),
                )
                for project in projects
            ],
            lists=[
                self._list_item(lst, project, window, tasks_per_list.get(lst.id, 0))
                for lst, project in lists
            ],
            tasks=[self._task_item(task, lst, project, window) for task, lst, project in tasks],
            retention_days=window.days,
        )

    def project_trash(self, project_id: int, actor: User) -> ProjectTrashResponse:
        """Get trashed lists and tasks of one project.

        Any member may read it. Non-members get NotFound.
        """
        project = self.db.query(Project).filter(Project.id == project_id).first()
        if project is None or not self.authorization.can_view(self.db, actor, project):
            raise NotFound("Project not found")

        window = self.retention.retention_window(project.owner)

        lists = (
            self.db.query(TaskList)
            .filter(TaskList.project_id == project.id, TaskList.deleted_at.is_not(None))
            .order_by(TaskList.deleted_at.desc(), TaskList.id.desc())
            .all()
        )
        tasks_per_list = self._task_counts(Task.list_id, [lst.id for lst in lists])

        tasks = (
            self.db.query(Task, TaskList)
            .join(TaskList, Task.list_id == TaskList.id)
            .filter(Task.project_id == project.id, Task.deleted_at.is_not(None))
            .order_by(Task.deleted_at.desc(), Task.id.desc())
            .all()
        )

        return ProjectTrashResponse(
            lists=[
                self._list_item(lst, project, window, tasks_per_list.get(lst.id, 0))
                for lst in lists
            ],
            tasks=[self._task_item(task, lst, project, window) for task, lst in tasks],
            retention_days=window.days,
        )

    def _list_item(
        self, lst: TaskList, project: Project, window: timedelta, tasks_count: int
    ) -> TrashItem:
        return TrashItem(
            kind=EntityKind.LIST,
            id=lst.id,
            name=lst.name,
            project=EntitySummary(id=project.id, name=project.name, color=project.color),
            deleted_at=as_utc(lst.deleted_at),
            expires_at=as_utc(lst.deleted_at) + window,
            trash_state=lst.trash_state,
            trashed_via=_origin(lst),
            tasks_count=tasks_count,
        )

    def _task_item(
        self, task: Task, lst: TaskList, project: Project, window: timedelta
    ) -> TrashItem:
        return TrashItem(
            kind=EntityKind.TASK,
            id=task.id,
            name=task.title,
            project=EntitySummary(id=project.id, name=project.name, color=project.color),
            list=EntitySummary(id=lst.id, name=lst.name),
            deleted_at=as_utc(task.deleted_at),
            expires_at=as_utc(task.deleted_at) + window,
            trash_state=task.trash_state,
            trashed_via=_origin(task),
        )

    def _list_counts_by_project(self, project_ids: list[int]) -> dict[int, int]:
        if not project_ids:
            return {}
        counts = (
            self.db.query(TaskList.project_id, func.count(TaskList.id))
            .filter(TaskList.project_id.in_(project_ids))
            .group_by(TaskList.project_id)
            .all()
        )
        return dict(counts)

    def _task_counts(self, column, parent_ids: list[int]) -> dict[int, int]:
        """Count tasks (trashed included) grouped by a parent column."""
        if not parent_ids:
            return {}
        counts = (
            self.db.query(column, func.count(Task.id))
            .filter(column.in_(parent_ids))
            .group_by(column)
            .all()
        )
        return dict(counts)
