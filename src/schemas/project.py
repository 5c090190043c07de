"""Project schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from src.models.enums import ProjectRole


class ProjectCreate(BaseModel):
    """Create a new project."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    color: str | None = Field(None, max_length=20)
    icon: str | None = Field(None, max_length=50)


class ProjectResponse(BaseModel):
    """Project response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    name: str
    description: str | None
    color: str | None
    icon: str | None
    is_archived: bool
    created_at: datetime
    updated_at: datetime


class ProjectMemberCreate(BaseModel):
    """Add a member to a project."""

    user_email: EmailStr = Field(..., max_length=255)
    role: ProjectRole = ProjectRole.VIEWER


class ProjectMemberResponse(BaseModel):
    """Project member response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    user_id: int
    role: ProjectRole
