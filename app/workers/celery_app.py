"""Celery application configuration.

This module configures the Celery application for ShadowCast background tasks.
Uses Redis as both broker and result backend, and Celery Beat to start one
generation run per configured batch every day.
"""

from typing import Any

from celery import Celery
from celery.schedules import crontab

from app.config.generation import GenerationConfig
from app.core.config import get_config

_config = get_config()
_time_budget = GenerationConfig().time_budget

# Create Celery app
celery_app = Celery(
    "shadowcast",
    broker=str(_config.celery_broker_url),
    backend=str(_config.celery_result_backend),
)


def build_beat_schedule(batch_schedule: dict[int, str]) -> dict[str, Any]:
    """Build Celery Beat entries from ``{batch: "HH:MM"}``.

    Args:
        batch_schedule: Daily UTC start time per batch number

    Returns:
        Beat schedule with one ``generate_lessons`` entry per batch
    """
    beat_schedule: dict[str, Any] = {}
    for batch, start in sorted(batch_schedule.items()):
        hour, _, minute = start.partition(":")
        beat_schedule[f"generate-batch-{batch}"] = {
            "task": "app.workers.generate.generate_lessons",
            "schedule": crontab(minute=int(minute), hour=int(hour)),
            "kwargs": {"batch": batch},
            "options": {"queue": "generate"},
        }
    return beat_schedule


# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task execution settings; the hard limit is the run's time-budget ceiling
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=int(_time_budget.ceiling_seconds),
    task_soft_time_limit=int(_time_budget.ceiling_seconds - _time_budget.safety_buffer_seconds),
    # Worker settings
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,
    # Result settings
    result_expires=86400,  # 24 hours
    result_extended=True,
    # Beat scheduler settings
    beat_scheduler="celery.beat:PersistentScheduler",
    beat_schedule_filename="celerybeat-schedule",
    beat_schedule=build_beat_schedule(_config.generation_batch_schedule),
    # Task routes
    task_routes={
        "app.workers.generate.*": {"queue": "generate"},
    },
    # Default queue
    task_default_queue="default",
)

# Auto-discover tasks from these modules
celery_app.autodiscover_tasks(
    [
        "app.workers.generate",
    ]
)

__all__ = ["build_beat_schedule", "celery_app"]
