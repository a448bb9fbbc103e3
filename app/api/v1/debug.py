"""Environment diagnostics.

Reports which secrets are configured without revealing them. Disabled in
production.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from app.core.config import Config, get_config

router = APIRouter(prefix="/api", tags=["debug"])

_CHECKED_SETTINGS = (
    "cron_secret",
    "api_secret",
    "gemini_api_key",
    "google_tts_credentials",
    "s3_access_key_id",
    "s3_secret_access_key",
)


@router.get("/debug")
async def environment_check(config: Config = Depends(get_config)) -> dict[str, Any]:
    """Report configured secrets as presence flags and lengths."""
    if config.is_production:
        raise HTTPException(status_code=404, detail="Not Found")

    settings: dict[str, dict[str, Any]] = {}
    for name in _CHECKED_SETTINGS:
        value = getattr(config, name)
        settings[name] = {"configured": bool(value), "length": len(value)}

    return {
        "app_env": config.app_env,
        "debug": config.debug,
        "storage_type": config.storage_type,
        "translation_languages": config.translation_languages,
        "settings": settings,
    }
