"""Enums for model fields."""

from enum import Enum


class ProjectRole(str, Enum):
    """Role a user holds within a project."""

    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"

    def can_edit(self) -> bool:
        """Check if this role allows creating and editing lists/tasks."""
        return self in (ProjectRole.OWNER, ProjectRole.EDITOR)

    def can_delete(self) -> bool:
        """Check if this role allows trashing and restoring content."""
        return self == ProjectRole.OWNER


class UserPlan(str, Enum):
    """Subscription plan of a user."""

    FREE = "free"
    PRO = "pro"


class TaskPriority(str, Enum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class EntityKind(str, Enum):
    """Kinds of entity in the project hierarchy, outermost first."""

    PROJECT = "project"
    LIST = "list"
    TASK = "task"

    @property
    def depth(self) -> int:
        """Position in the hierarchy (project=0, list=1, task=2)."""
        return list(EntityKind).index(self)


class TrashState(str, Enum):
    """Lifecycle state of a hierarchy row.

    TRASHED_DIRECT rows were deleted by an actor. TRASHED_CASCADED rows were
    swept into the trash by an ancestor's deletion and point at that
    ancestor through trashed_via_kind/trashed_via_id.
    """

    ACTIVE = "active"
    TRASHED_DIRECT = "trashed_direct"
    TRASHED_CASCADED = "trashed_cascaded"
