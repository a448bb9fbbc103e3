"""Unit tests for the lesson generation task."""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.models.generation_log import TriggerType
from app.services.pipeline.coordinator import RunReport
from app.workers.generate import _generate_lessons_async, generate_lessons


@pytest.fixture
def coordinator() -> MagicMock:
    coordinator = MagicMock()
    coordinator.run = AsyncMock(return_value=RunReport())
    return coordinator


@pytest.fixture
def patched(coordinator):
    container = MagicMock()
    container.services.run_coordinator.return_value = coordinator
    with (
        patch("app.workers.generate.container", container),
        patch(
            "app.workers.generate.close_container_resources", new_callable=AsyncMock
        ) as close,
    ):
        yield close


class TestGenerateLessonsAsync:
    """Tests for _generate_lessons_async."""

    @pytest.mark.asyncio
    async def test_runs_cron_request(self, coordinator, patched) -> None:
        series_id = uuid.uuid4()

        result = await _generate_lessons_async(None, [str(series_id)], ["ja"])

        request = coordinator.run.await_args.args[0]
        assert request.trigger is TriggerType.CRON
        assert request.series_ids == [series_id]
        assert request.translation_languages == ["ja"]
        assert result["status"] == "success"
        patched.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_resources_closed_on_failure(self, coordinator, patched) -> None:
        coordinator.run.side_effect = RuntimeError("db down")

        with pytest.raises(RuntimeError):
            await _generate_lessons_async(1, None, None)

        patched.assert_awaited_once()


class TestGenerateLessonsTask:
    """Tests for the Celery task body."""

    def test_task_name(self) -> None:
        assert generate_lessons.name == "app.workers.generate.generate_lessons"

    def test_batch_run(self, coordinator, patched) -> None:
        result = generate_lessons.run(batch=2)

        assert coordinator.run.await_args.args[0].batch == 2
        assert result["success"] is False
        assert result["message"] == "Generated content for 0 series"

    def test_failure_propagates(self, coordinator, patched) -> None:
        coordinator.run.side_effect = RuntimeError("db down")

        with pytest.raises(RuntimeError, match="db down"):
            generate_lessons.run(batch=1)
