"""Task list schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TaskListCreate(BaseModel):
    """Create a new task list."""

    name: str = Field(..., min_length=1, max_length=255)
    position: int | None = None


class TaskListResponse(BaseModel):
    """Task list response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    name: str
    position: int
    created_at: datetime
    updated_at: datetime
