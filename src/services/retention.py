"""Trash retention policy."""

from datetime import UTC, datetime, timedelta
from typing import Protocol

from src.config import Settings, get_settings
from src.models.enums import UserPlan
from src.models.user import User


class RetentionPolicy(Protocol):
    """Supplies how long trashed entities stay restorable for an owner."""

    def retention_window(self, owner: User) -> timedelta: ...


class PlanRetentionPolicy:
    """Retention window chosen by the owner's subscription plan."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def retention_days(self, owner: User | None) -> int:
        if owner is not None and owner.plan == UserPlan.PRO:
            return self.settings.trash_retention_days_pro
        return self.settings.trash_retention_days

    def retention_window(self, owner: User) -> timedelta:
        return timedelta(days=self.retention_days(owner))


class FixedRetentionPolicy:
    """Same retention window for every owner (used for manual purge overrides)."""

    def __init__(self, days: int):
        self.days = days

    def retention_window(self, owner: User) -> timedelta:
        return timedelta(days=self.days)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything is stored in UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
