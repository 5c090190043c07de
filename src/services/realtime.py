"""Project event publishing using Redis pub/sub."""

import json
import logging
from datetime import UTC, datetime
from enum import StrEnum
from typing import Protocol

import redis

from src.config import get_settings
from src.models.user import User
from src.services.hierarchy import EntityRef

logger = logging.getLogger(__name__)
settings = get_settings()


class ProjectEventType(StrEnum):
    """Event types for trash lifecycle changes."""

    ENTITY_TRASHED = "entity_trashed"
    ENTITY_RESTORED = "entity_restored"
    ENTITY_PURGED = "entity_purged"
    TRASH_EMPTIED = "trash_emptied"


class Notifier(Protocol):
    """Fire-and-forget receiver of lifecycle events.

    Called after the lifecycle transaction has committed.
    """

    def notify(
        self,
        event: ProjectEventType,
        entity: EntityRef | None,
        actor: User | None,
        project_id: int | None = None,
        data: dict | None = None,
    ) -> None: ...


# Synchronous Redis client for use in API endpoints
_sync_redis: redis.Redis | None = None


def get_sync_redis() -> redis.Redis:
    """Get synchronous Redis client for publishing from API endpoints."""
    global _sync_redis
    if _sync_redis is None:
        _sync_redis = redis.from_url(settings.redis_url)
    return _sync_redis


def publish_project_event(
    project_id: int, event_type: ProjectEventType, data: dict | None = None
) -> None:
    """Publish an event to a project's Redis channel.

    Args:
        project_id: The project ID to publish to
        event_type: Type of event (entity_trashed, entity_restored, etc.)
        data: Optional event payload
    """
    try:
        redis_client = get_sync_redis()
        channel = f"project:{project_id}"
        message = {
            "type": event_type,
            "project_id": project_id,
            "timestamp": datetime.now(UTC).isoformat(),
            "data": data or {},
        }
        redis_client.publish(channel, json.dumps(message))
        logger.debug(f"Published {event_type} to {channel}")
    except Exception as e:
        # Don't fail the request if pub/sub fails
        logger.error(f"Failed to publish project event: {e}")


class RealtimeNotifier:
    """Notifier that publishes lifecycle events to project channels."""

    def notify(
        self,
        event: ProjectEventType,
        entity: EntityRef | None,
        actor: User | None,
        project_id: int | None = None,
        data: dict | None = None,
    ) -> None:
        if project_id is None:
            return
        payload = dict(data or {})
        if entity is not None:
            payload["entity"] = {"kind": entity.kind.value, "id": entity.id}
        payload["actor_id"] = actor.id if actor is not None else None
        publish_project_event(project_id, event, payload)


class NullNotifier:
    """Notifier that discards every event."""

    def notify(
        self,
        event: ProjectEventType,
        entity: EntityRef | None,
        actor: User | None,
        project_id: int | None = None,
        data: dict | None = None,
    ) -> None:
        return None
