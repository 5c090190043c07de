"""Task schemas."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.enums import TaskPriority


class TaskCreate(BaseModel):
    """Create a new task."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = Field(None, max_length=5000)
    priority: TaskPriority | None = None
    due_date: date | None = None
    assignee_id: int | None = None
    position: int = 0


class TaskResponse(BaseModel):
    """Task response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    list_id: int
    project_id: int
    title: str
    description: str | None
    priority: TaskPriority | None
    due_date: date | None
    position: int
    assignee_id: int | None
    created_by: int | None
    created_at: datetime
    updated_at: datetime
