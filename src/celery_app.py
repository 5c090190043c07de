"""Celery application configuration."""

from celery import Celery
from celery.schedules import crontab

from src.config import get_settings

settings = get_settings()

app = Celery(
    "taskhub",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["src.tasks.trash_cleanup"],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=1800,  # 30 minutes max per task
    task_soft_time_limit=1500,
    beat_schedule={
        "purge-expired-trash": {
            "task": "src.tasks.trash_cleanup.purge_expired_trash",
            "schedule": crontab(hour=settings.trash_cleanup_hour, minute=0),
        },
    },
)
