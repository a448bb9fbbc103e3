"""Celery workers for ShadowCast.

This package contains Celery tasks and configuration for background processing.

Modules:
- celery_app: Celery application configuration and batch beat schedule
- generate: Lesson generation task
"""

from app.workers.celery_app import build_beat_schedule, celery_app

__all__ = [
    "build_beat_schedule",
    "celery_app",
]
