"""Tests for trigger request validation."""

import uuid

import pytest
from pydantic import ValidationError

from app.api.v1.schemas import GenerateContentRequest, format_validation_error


def _error_message(**params) -> str:
    with pytest.raises(ValidationError) as exc_info:
        GenerateContentRequest.model_validate(params)
    return format_validation_error(exc_info.value)


class TestGenerateContentRequest:
    """Tests for GenerateContentRequest."""

    def test_empty(self) -> None:
        request = GenerateContentRequest.model_validate({})
        assert request.series_ids is None
        assert request.batch is None
        assert request.translation_languages is None

    def test_single_series_id_string(self) -> None:
        series_id = uuid.uuid4()
        request = GenerateContentRequest.model_validate({"series_ids": str(series_id)})
        assert request.series_ids == [series_id]

    def test_integral_float_batch(self) -> None:
        assert GenerateContentRequest.model_validate({"batch": 3.0}).batch == 3

    def test_unknown_fields_ignored(self) -> None:
        assert GenerateContentRequest.model_validate({"foo": 1}).batch is None

    @pytest.mark.parametrize(
        ("params", "message"),
        [
            ({"series_ids": 5}, "series_ids: series_ids must be an array"),
            ({"series_ids": ["nope"]}, "series_ids: Invalid UUID format for series_id"),
            (
                {"series_ids": [str(uuid.uuid4()) for _ in range(21)]},
                "series_ids: Maximum 20 series IDs allowed",
            ),
            ({"batch": "two"}, "batch: Batch must be an integer"),
            ({"batch": True}, "batch: Batch must be an integer"),
            ({"batch": 1.5}, "batch: Batch must be an integer"),
            ({"batch": 0}, "batch: Batch must be >= 1"),
            ({"batch": 101}, "batch: Batch must be <= 100"),
            (
                {"translation_languages": "ja"},
                "translation_languages: translation_languages must be an array of strings",
            ),
            (
                {"translation_languages": ["ja"] * 11},
                "translation_languages: Maximum 10 translation languages allowed",
            ),
        ],
    )
    def test_invalid(self, params, message) -> None:
        assert _error_message(**params) == message

    def test_series_ids_and_batch_rejected(self) -> None:
        message = _error_message(series_ids=[str(uuid.uuid4())], batch=1)
        assert message == "Provide either series_ids or batch, not both"

    def test_multiple_errors_joined(self) -> None:
        message = _error_message(batch=0, translation_languages=[1])
        assert message == (
            "batch: Batch must be >= 1; "
            "translation_languages: translation_languages must be an array of strings"
        )
