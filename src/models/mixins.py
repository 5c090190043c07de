"""Mixins for SQLAlchemy models."""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Column, DateTime, Enum, Integer, func

from src.models.enums import EntityKind, TrashState


def enum_column(enum_cls: type[PyEnum]) -> Enum:
    """Store a str-enum by value in a plain VARCHAR column."""
    return Enum(
        enum_cls,
        native_enum=False,
        length=20,
        values_callable=lambda members: [member.value for member in members],
    )


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamp columns."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class SoftDeleteMixin:
    """Mixin to add soft delete functionality with cascade-origin tracking.

    deleted_at is null exactly when trash_state is ACTIVE.
    """

    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
    trash_state = Column(
        enum_column(TrashState),
        nullable=False,
        default=TrashState.ACTIVE,
        server_default=TrashState.ACTIVE.value,
    )
    trashed_via_kind = Column(enum_column(EntityKind), nullable=True)
    trashed_via_id = Column(Integer, nullable=True)

    @property
    def is_deleted(self) -> bool:
        """Check if the record is soft-deleted."""
        return self.deleted_at is not None

    def soft_delete(self, when: datetime) -> None:
        """Mark the record as deleted directly by an actor."""
        self.deleted_at = when
        self.trash_state = TrashState.TRASHED_DIRECT
        self.trashed_via_kind = None
        self.trashed_via_id = None

    def cascade_delete(self, when: datetime, via_kind: EntityKind, via_id: int) -> None:
        """Mark the record as deleted because its ancestor was deleted."""
        self.deleted_at = when
        self.trash_state = TrashState.TRASHED_CASCADED
        self.trashed_via_kind = via_kind
        self.trashed_via_id = via_id

    def was_cascaded_from(self, kind: EntityKind, entity_id: int) -> bool:
        """Check if the record was trashed by the given ancestor's deletion."""
        return (
            self.trash_state == TrashState.TRASHED_CASCADED
            and self.trashed_via_kind == kind
            and self.trashed_via_id == entity_id
        )

    def restore(self) -> None:
        """Restore a soft-deleted record."""
        self.deleted_at = None
        self.trash_state = TrashState.ACTIVE
        self.trashed_via_kind = None
        self.trashed_via_id = None
