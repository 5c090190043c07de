"""Task list model."""

from sqlalchemy import Column, ForeignKey, Integer, String

from src.database import Base
from src.models.mixins import SoftDeleteMixin, TimestampMixin


class TaskList(Base, TimestampMixin, SoftDeleteMixin):
    """Ordered list of tasks inside a project."""

    __tablename__ = "task_lists"

    id = Column(Integer, primary_key=True, index=True)
    # Immutable after creation
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    position = Column(Integer, default=0, nullable=False)
