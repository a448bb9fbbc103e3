"""FastAPI application entry point.

Exposes the generation trigger, the configuration diagnostics endpoint,
health checks and, with local storage, the generated audio files.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app import models  # noqa: F401  (registers tables for init_db)
from app.api.v1 import debug, generation
from app.core.config import Config, get_config
from app.core.container import close_container_resources
from app.core.database import check_db_connection, close_db, init_db
from app.core.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create tables in development; release pools and clients on shutdown."""
    config = get_config()
    logger.info(
        "Starting ShadowCast application",
        env=config.app_env,
        storage=config.storage_type,
        translation_languages=config.translation_languages,
    )

    # Production schemas come from alembic migrations
    if config.is_development:
        try:
            if await check_db_connection():
                await init_db()
                logger.info("Database initialized")
            else:
                logger.warning("Database connection not available, skipping initialization")
        except Exception as e:
            logger.warning(
                "Database initialization skipped", error=str(e), hint="Use migrations in production"
            )

    yield

    logger.info("Shutting down ShadowCast application")
    await close_db()
    await close_container_resources()
    logger.info("Cleanup complete")


def create_app(config: Config | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Application configuration (process config if None)

    Returns:
        Configured application
    """
    config = config or get_config()
    application = FastAPI(
        title=config.app_name,
        description="Daily listening-lesson generation service",
        version=API_VERSION,
        docs_url="/docs" if config.is_development else None,
        redoc_url="/redoc" if config.is_development else None,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(generation.router)
    application.include_router(debug.router)

    # Lesson audio URLs point here when blobs live on the local disk
    if config.storage_type == "local":
        application.mount(
            "/audio",
            StaticFiles(
                directory=Path(config.local_storage_path) / config.audio_bucket,
                check_dir=False,
            ),
            name="audio",
        )

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        cfg = get_config()
        return {
            "status": "healthy",
            "app": cfg.app_name,
            "env": cfg.app_env,
            "storage": cfg.storage_type,
        }

    @application.get("/")
    async def root() -> dict[str, str]:
        return {
            "message": "ShadowCast API",
            "version": API_VERSION,
            "trigger": "/api/generate-content",
            "docs": "/docs" if get_config().is_development else "disabled",
        }

    return application


app = create_app()
