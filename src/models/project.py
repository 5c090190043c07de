"""Project model."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.enums import ProjectRole
from src.models.mixins import SoftDeleteMixin, TimestampMixin, enum_column


class Project(Base, TimestampMixin, SoftDeleteMixin):
    """Top-level container owning task lists and tasks."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String, nullable=True)
    color = Column(String(20), nullable=True)
    icon = Column(String(50), nullable=True)  # emoji or icon name
    is_archived = Column(Boolean, default=False, nullable=False)

    # Relationships
    owner = relationship("User", backref="projects")
    members = relationship("ProjectMember", back_populates="project", cascade="all, delete-orphan")


class ProjectMember(Base, TimestampMixin):
    """Membership of a non-owner user in a project."""

    __tablename__ = "project_members"
    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_project_member"),)

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(enum_column(ProjectRole), nullable=False, default=ProjectRole.VIEWER)

    # Relationships
    project = relationship("Project", back_populates="members")
    user = relationship("User", backref="project_memberships")
