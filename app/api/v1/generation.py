"""Generation trigger endpoint.

``/api/generate-content`` starts one generation run. A scheduler calls it
with ``Authorization: Bearer <CRON_SECRET>``; operators call it with the
API secret in the ``x-api-secret`` header or the ``secret`` query
parameter.
"""

import hmac
import json
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.api.v1.schemas import ErrorResponse, GenerateContentRequest, format_validation_error
from app.core.config import Config, get_config
from app.core.container import get_run_coordinator
from app.core.logging import get_logger
from app.models.generation_log import TriggerType
from app.services.pipeline.coordinator import RunCoordinator, RunRequest

router = APIRouter(prefix="/api", tags=["generation"])
logger = get_logger(__name__)

ALLOWED_METHODS = ("GET", "POST")
# Every other method gets the endpoint's own 405 body
REJECTED_METHODS = ("PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "TRACE")


class RequestRejected(Exception):
    """Request refused before any generation work started."""

    def __init__(self, status_code: int, error: str, message: str) -> None:
        self.status_code = status_code
        self.body = ErrorResponse(error=error, message=message)
        super().__init__(message)

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.body.model_dump())


def _secret_matches(provided: str | None, expected: str) -> bool:
    if not expected or not provided:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())


def authorize(request: Request, config: Config) -> TriggerType:
    """Identify the caller.

    Args:
        request: Incoming request
        config: Application configuration holding the secrets

    Returns:
        ``TriggerType.CRON`` for the scheduler, ``TriggerType.MANUAL`` otherwise

    Raises:
        RequestRejected: 401 if neither secret matches
    """
    authorization = request.headers.get("authorization")
    if config.cron_secret and _secret_matches(authorization, f"Bearer {config.cron_secret}"):
        return TriggerType.CRON

    api_secret = request.headers.get("x-api-secret") or request.query_params.get("secret")
    if _secret_matches(api_secret, config.api_secret):
        return TriggerType.MANUAL

    logger.warning(
        "Unauthorized trigger attempt",
        method=request.method,
        has_authorization=authorization is not None,
        has_api_secret=api_secret is not None,
    )
    raise RequestRejected(401, "Unauthorized", "Invalid or missing API secret")


async def _read_body(request: Request) -> dict[str, Any]:
    if request.method != "POST":
        return {}
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise RequestRejected(400, "Invalid request parameters", "body: Invalid JSON") from e
    if not isinstance(data, dict):
        raise RequestRejected(400, "Invalid request parameters", "body: Expected an object")
    return data


def _query_batch(request: Request) -> Any:
    value = request.query_params.get("batch")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return value


def merge_parameters(body: dict[str, Any], request: Request) -> dict[str, Any]:
    """Combine body fields with their query-string fallbacks.

    ``batch`` and ``series_ids`` may come from the query string; a body
    value wins when both are present. ``translation_languages`` is body-only.
    """
    batch = body.get("batch")
    if batch is None:
        batch = _query_batch(request)

    series_ids = body.get("series_ids")
    if not series_ids:
        query_ids = request.query_params.getlist("series_ids")
        series_ids = query_ids or None

    return {
        "series_ids": series_ids,
        "batch": batch,
        "translation_languages": body.get("translation_languages"),
    }


@router.api_route("/generate-content", methods=list(ALLOWED_METHODS))
async def generate_content(
    request: Request,
    config: Config = Depends(get_config),
    coordinator: RunCoordinator = Depends(get_run_coordinator),
) -> JSONResponse:
    """Run content generation for the selected series.

    Returns:
        Run report; 400/401 on rejected input, 500 if the run could not start
    """
    try:
        trigger = authorize(request, config)
        params = merge_parameters(await _read_body(request), request)
        try:
            payload = GenerateContentRequest.model_validate(params)
        except ValidationError as e:
            raise RequestRejected(
                400, "Invalid request parameters", format_validation_error(e)
            ) from e
    except RequestRejected as e:
        return e.to_response()

    logger.info(
        "Generation triggered",
        trigger=trigger.value,
        series_ids=[str(s) for s in payload.series_ids or []],
        batch=payload.batch,
    )

    try:
        report = await coordinator.run(
            RunRequest(
                trigger=trigger,
                series_ids=payload.series_ids,
                batch=payload.batch,
                translation_languages=payload.translation_languages,
            )
        )
    except Exception as e:
        logger.error("Content generation failed", error=str(e), exc_info=True)
        body = ErrorResponse(error=str(e), message="Failed to generate content")
        return JSONResponse(status_code=500, content=body.model_dump())

    return JSONResponse(status_code=200, content=report.to_dict())


@router.api_route(
    "/generate-content",
    methods=list(REJECTED_METHODS),
    include_in_schema=False,
)
async def generate_content_method_not_allowed() -> JSONResponse:
    body = ErrorResponse(
        error="Method not allowed",
        message="Only POST and GET requests are allowed",
    )
    return JSONResponse(
        status_code=405,
        content=body.model_dump(),
        headers={"Allow": ", ".join(ALLOWED_METHODS)},
    )


__all__ = ["authorize", "merge_parameters", "router"]
