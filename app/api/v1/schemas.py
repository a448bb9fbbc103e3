"""Request and response schemas for the generation API."""

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

MAX_SERIES_IDS = 20
MAX_TRANSLATION_LANGUAGES = 10
MIN_BATCH = 1
MAX_BATCH = 100


class GenerateContentRequest(BaseModel):
    """Input of the trigger endpoint.

    Attributes:
        series_ids: Explicit series to generate (at most 20)
        batch: Batch number selecting series (1-100)
        translation_languages: Override of the default translation languages
    """

    model_config = ConfigDict(extra="ignore")

    series_ids: list[uuid.UUID] | None = None
    batch: int | None = None
    translation_languages: list[str] | None = Field(default=None)

    @field_validator("series_ids", mode="before")
    @classmethod
    def validate_series_ids(cls, v: Any) -> Any:
        if v is None:
            return None
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, list):
            raise ValueError("series_ids must be an array")
        if len(v) > MAX_SERIES_IDS:
            raise ValueError(f"Maximum {MAX_SERIES_IDS} series IDs allowed")

        parsed: list[uuid.UUID] = []
        for item in v:
            try:
                parsed.append(item if isinstance(item, uuid.UUID) else uuid.UUID(str(item)))
            except ValueError as e:
                raise ValueError("Invalid UUID format for series_id") from e
        return parsed

    @field_validator("batch", mode="before")
    @classmethod
    def validate_batch(cls, v: Any) -> Any:
        if v is None:
            return None
        if isinstance(v, bool) or not isinstance(v, int):
            if isinstance(v, float) and v.is_integer():
                v = int(v)
            else:
                raise ValueError("Batch must be an integer")
        if v < MIN_BATCH:
            raise ValueError(f"Batch must be >= {MIN_BATCH}")
        if v > MAX_BATCH:
            raise ValueError(f"Batch must be <= {MAX_BATCH}")
        return v

    @field_validator("translation_languages", mode="before")
    @classmethod
    def validate_translation_languages(cls, v: Any) -> Any:
        if v is None:
            return None
        if not isinstance(v, list) or not all(isinstance(lang, str) for lang in v):
            raise ValueError("translation_languages must be an array of strings")
        if len(v) > MAX_TRANSLATION_LANGUAGES:
            raise ValueError(
                f"Maximum {MAX_TRANSLATION_LANGUAGES} translation languages allowed"
            )
        return v

    @model_validator(mode="after")
    def check_selection(self) -> "GenerateContentRequest":
        if self.series_ids and self.batch is not None:
            raise ValueError("Provide either series_ids or batch, not both")
        return self


def format_validation_error(error: ValidationError) -> str:
    """Join field errors as ``path: message; path: message``.

    Messages raised by the validators above are reported verbatim, without
    Pydantic's ``Value error,`` prefix.
    """
    parts: list[str] = []
    for detail in error.errors():
        ctx_error = (detail.get("ctx") or {}).get("error")
        message = str(ctx_error) if ctx_error is not None else detail["msg"]
        path = ".".join(str(part) for part in detail["loc"])
        parts.append(f"{path}: {message}" if path else message)
    return "; ".join(parts)


class ErrorResponse(BaseModel):
    """Body of every non-200 response of the trigger endpoint."""

    success: bool = False
    error: str
    message: str


__all__ = [
    "ErrorResponse",
    "GenerateContentRequest",
    "MAX_BATCH",
    "MAX_SERIES_IDS",
    "MAX_TRANSLATION_LANGUAGES",
    "MIN_BATCH",
    "format_validation_error",
]
