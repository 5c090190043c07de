"""Task model."""

from sqlalchemy import Column, Date, ForeignKey, Integer, String

from src.database import Base
from src.models.enums import TaskPriority
from src.models.mixins import SoftDeleteMixin, TimestampMixin, enum_column


class Task(Base, TimestampMixin, SoftDeleteMixin):
    """Task inside a task list."""

    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    list_id = Column(Integer, ForeignKey("task_lists.id"), nullable=False, index=True)
    # Denormalized from the list
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(String, nullable=True)
    priority = Column(enum_column(TaskPriority), nullable=True)
    due_date = Column(Date, nullable=True)
    position = Column(Integer, default=0, nullable=False)
    assignee_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
