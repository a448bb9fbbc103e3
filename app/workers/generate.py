"""Lesson generation Celery task.

The scheduled counterpart of ``/api/generate-content``: Celery Beat enqueues
``generate_lessons`` once per batch and the task runs one coordinator pass
with trigger kind ``cron``.
"""

import asyncio
import uuid
from typing import Any

from celery import shared_task
from celery.utils.log import get_task_logger

from app.core.container import close_container_resources, container
from app.models.generation_log import TriggerType
from app.services.pipeline.coordinator import RunRequest

logger = get_task_logger(__name__)


async def _generate_lessons_async(
    batch: int | None,
    series_ids: list[str] | None,
    translation_languages: list[str] | None,
) -> dict[str, Any]:
    coordinator = container.services.run_coordinator()
    request = RunRequest(
        trigger=TriggerType.CRON,
        series_ids=[uuid.UUID(s) for s in series_ids] if series_ids else None,
        batch=batch,
        translation_languages=translation_languages,
    )
    try:
        report = await coordinator.run(request)
    finally:
        await close_container_resources()
    return report.to_dict()


@shared_task(
    name="app.workers.generate.generate_lessons",
)
def generate_lessons(
    batch: int | None = None,
    series_ids: list[str] | None = None,
    translation_languages: list[str] | None = None,
) -> dict[str, Any]:
    """Generate today's lessons for a batch or an explicit list of series.

    Not retried: a rerun would only skip the series already stored and the
    next scheduled run picks up the rest.

    Args:
        batch: Batch number (all active series if neither argument is set)
        series_ids: Explicit series ids, as strings
        translation_languages: Override of the default translation languages

    Returns:
        Run report as dict
    """
    logger.info(f"Starting lesson generation (batch={batch}, series_ids={series_ids})")

    try:
        result = asyncio.run(_generate_lessons_async(batch, series_ids, translation_languages))
    except Exception as exc:
        logger.error(f"Lesson generation failed: {exc}", exc_info=True)
        raise

    logger.info(
        f"Lesson generation complete: status={result['status']}, "
        f"series={len(result['results'])}, errors={len(result.get('errors', []))}"
    )
    return result


__all__ = ["generate_lessons"]
